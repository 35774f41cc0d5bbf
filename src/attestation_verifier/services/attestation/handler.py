"""
Verification request handler.

Runs one request through validation, platform evaluation and session
issuance, and maps the outcome to an HTTP status and body.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Union

from pydantic import ValidationError

from ...schemas.attestation import AttestationRequest
from .base import TrustDecision
from .config import AttestationConfig
from .events import AttestationEvents
from .registry import PlatformVerifierRegistry, VerifierUnavailableError
from .session import SessionArtifact, SessionIssuer
from .validator import AttestationValidationError, ValidationReason, validate_request

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "internal_error"


class RequestState(str, Enum):
    """Pipeline states of a single verification request."""
    RECEIVED = "received"
    VALIDATED = "validated"
    EVALUATED = "evaluated"
    ISSUED = "issued"
    RESPONDED = "responded"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationOutcome:
    """Terminal result of the pipeline. Failed outcomes never carry an artifact."""

    state: RequestState
    status_code: int
    body: Dict[str, Any]
    decision: Optional[TrustDecision] = None
    artifact: Optional[SessionArtifact] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RequestState.RESPONDED


def error_body(reason: str) -> Dict[str, Any]:
    return {"success": False, "error": reason}


class VerificationHandler:
    """
    Orchestrates Validator -> Registry -> SessionIssuer for each request.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(self, registry: PlatformVerifierRegistry, issuer: SessionIssuer,
                 events: Optional[AttestationEvents] = None):
        self.registry = registry
        self.issuer = issuer
        self.events = events or registry.events

    @classmethod
    def from_config(cls, config: AttestationConfig,
                    events: Optional[AttestationEvents] = None) -> "VerificationHandler":
        events = events or AttestationEvents()
        registry = PlatformVerifierRegistry.from_config(config, events)
        issuer = SessionIssuer(config.nullifier_secret)
        return cls(registry, issuer, events)

    async def handle(self, payload: Union[AttestationRequest, Dict[str, Any], Any],
                     timeout: Optional[float] = None) -> VerificationOutcome:
        """
        Run the verification pipeline.

        Args:
            payload: Parsed request model or decoded JSON body
            timeout: Optional override of the verifier timeout

        Returns:
            VerificationOutcome (200 on issuance, 400 on rejection,
            500 on internal failure)
        """
        self.events.request_received()

        try:
            request = self._parse(payload)
            platform = validate_request(request)
        except AttestationValidationError as e:
            return self._reject(e.reason)

        # RequestState.VALIDATED
        try:
            decision = await self.registry.evaluate(
                platform,
                request.integrity_token,
                request.device_key,
                request.nonce,
                timeout=timeout,
            )
        except VerifierUnavailableError as e:
            return self._fail(str(e))
        except Exception as e:
            logger.error(f"Unexpected evaluation failure: {e}", exc_info=True)
            return self._fail(f"evaluation error: {type(e).__name__}")

        # RequestState.EVALUATED
        try:
            artifact = self.issuer.issue(decision, request.device_key)
            body = artifact.to_response()
        except Exception as e:
            logger.error(f"Unexpected issuance failure: {e}", exc_info=True)
            return self._fail(f"issuance error: {type(e).__name__}", decision)

        # RequestState.ISSUED
        self.events.session_issued(platform.value, artifact.trust_score, artifact.trusted, artifact.nullifier)
        return VerificationOutcome(
            state=RequestState.RESPONDED,
            status_code=200,
            body=body,
            decision=decision,
            artifact=artifact,
        )

    def _parse(self, payload) -> AttestationRequest:
        if isinstance(payload, AttestationRequest):
            return payload
        if not isinstance(payload, dict):
            raise AttestationValidationError(ValidationReason.MALFORMED_REQUEST)
        try:
            return AttestationRequest.model_validate(payload)
        except ValidationError:
            raise AttestationValidationError(ValidationReason.MALFORMED_REQUEST)

    def _reject(self, reason: ValidationReason) -> VerificationOutcome:
        self.events.request_rejected(reason.value)
        return VerificationOutcome(
            state=RequestState.REJECTED,
            status_code=400,
            body=error_body(reason.value),
        )

    def _fail(self, message: str, decision: Optional[TrustDecision] = None) -> VerificationOutcome:
        self.events.request_failed(message)
        return VerificationOutcome(
            state=RequestState.FAILED,
            status_code=500,
            body=error_body(INTERNAL_ERROR),
            decision=decision,
        )
