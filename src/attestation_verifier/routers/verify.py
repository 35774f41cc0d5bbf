"""
Attestation verification router.

POST /verify accepts a device attestation and answers with a trust-scored
session, or a structured error.
"""

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..dependencies import get_verification_handler
from ..schemas.attestation import AttestationRequest, ErrorResponse, VerificationResponse
from ..services.attestation import VerificationHandler

router = APIRouter(tags=["Attestation"])

DISCONNECT_POLL_INTERVAL = 0.05

# nginx convention for "client closed request"; never seen by the client
CLIENT_CLOSED_REQUEST = 499


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


@router.post(
    "/verify",
    response_model=VerificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failure"},
        500: {"model": ErrorResponse, "description": "Internal failure"},
    },
)
async def verify_attestation(
    payload: AttestationRequest,
    request: Request,
    handler: VerificationHandler = Depends(get_verification_handler),
):
    """
    Verify a device attestation and issue a session.

    Low trust scores still produce a session; the relying party decides
    what a score permits. If the client disconnects first, the in-flight
    evaluation is abandoned.
    """
    pipeline = asyncio.ensure_future(handler.handle(payload))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))

    try:
        done, _ = await asyncio.wait({pipeline, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not pipeline.done():
            pipeline.cancel()

    if pipeline not in done:
        handler.events.request_abandoned()
        return JSONResponse(
            status_code=CLIENT_CLOSED_REQUEST,
            content={"success": False, "error": "client_disconnected"},
        )

    outcome = pipeline.result()
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
