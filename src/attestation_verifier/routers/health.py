"""
Liveness and readiness endpoints.
"""

from typing import Dict, Any

from fastapi import APIRouter, Depends, Response, status

from .. import __version__
from ..dependencies import get_attestation_events, get_verification_handler
from ..services.attestation import AttestationEvents, VerificationHandler

router = APIRouter(tags=["Health"])


@router.get("/healthz")
async def healthz(
    handler: VerificationHandler = Depends(get_verification_handler),
    events: AttestationEvents = Depends(get_attestation_events),
) -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": "attestation-verifier",
        "version": __version__,
        "verifiers": handler.registry.get_verifier_status(),
        "metrics": events.get_metrics(),
    }


@router.get("/readyz")
async def readyz(handler: VerificationHandler = Depends(get_verification_handler)):
    if handler.registry.is_healthy():
        return {"status": "ready"}
    return Response(
        content='{"status":"not-ready"}',
        media_type="application/json",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
