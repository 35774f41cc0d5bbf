"""
Session issuance for evaluated attestation requests.
"""

import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .base import TrustDecision

logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """Unguessable session token (256 bits from the OS CSPRNG)."""
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class SessionArtifact:
    """Session handed back to the client. Never stored by the verifier."""

    token: str
    trust_score: float
    issued_at: int
    nullifier: str
    trusted: bool

    def to_response(self) -> dict:
        """Wire form of a successful verification."""
        return {
            "success": True,
            "token": self.token,
            "trustScore": self.trust_score,
            "nullifier": self.nullifier,
            "issuedAt": self.issued_at,
        }


class SessionIssuer:
    """
    Turns a trust decision into a session artifact.

    The nullifier is HMAC-SHA256 of the device key under a configured
    secret: stable for a device across restarts, not reversible.
    """

    def __init__(self, nullifier_secret: str,
                 token_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], float]] = None):
        if not nullifier_secret:
            raise ValueError("nullifier_secret is required")
        self._nullifier_key = nullifier_secret.encode("utf-8")
        self._token_factory = token_factory or generate_session_token
        self._clock = clock or time.time

    def derive_nullifier(self, device_key: str) -> str:
        return hmac.new(self._nullifier_key, device_key.strip().encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self, decision: TrustDecision, device_key: str) -> SessionArtifact:
        """
        Issue a session for any decision, including 0.0 scores.

        Whether a low-trust session is acceptable is up to the relying party.
        """
        return SessionArtifact(
            token=self._token_factory(),
            trust_score=decision.score,
            issued_at=max(0, int(self._clock())),
            nullifier=self.derive_nullifier(device_key),
            trusted=decision.trusted,
        )
