"""
Base classes and common functionality for platform attestation verifiers.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any

from cryptography.hazmat.primitives import serialization

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """Client platforms accepted by the verifier."""
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


def load_public_key(path: str):
    """Load a PEM encoded public key from disk."""
    try:
        with open(path, "rb") as f:
            return serialization.load_pem_public_key(f.read())
    except FileNotFoundError:
        raise ValueError(f"Public key file not found: {path}")


def clamp_score(score: float) -> float:
    """Clamp a raw verifier score into [0.0, 1.0]."""
    return max(0.0, min(1.0, float(score)))


@dataclass(frozen=True)
class VerificationVerdict:
    """Raw outcome of a single platform verifier run."""

    score: float
    reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TrustDecision:
    """Trust score for one request, produced by the verifier registry."""

    score: float
    trusted: bool
    platform: Optional[str] = None
    verifier: Optional[str] = None
    timed_out: bool = False
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_score(cls, score: float, threshold: float = 0.5, **kwargs) -> "TrustDecision":
        score = clamp_score(score)
        return cls(score=score, trusted=score >= threshold, **kwargs)

    @property
    def is_degraded(self) -> bool:
        """True when the score was forced to 0.0 by a timeout or verifier failure."""
        return self.timed_out or self.error is not None


class PlatformVerifier(ABC):
    """
    Abstract base class for platform attestation verifiers.

    Implementations must be deterministic for a given input and must only
    read their configuration; the registry may call them concurrently.
    """

    def __init__(self, config: 'AttestationConfig'):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def verify(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        """
        Evaluate a platform integrity token.

        Args:
            integrity_token: Opaque platform attestation blob
            device_key: Device public key identifier
            nonce: Freshness token agreed with the client

        Returns:
            VerificationVerdict with a trust score in [0.0, 1.0]
        """
        pass

    @abstractmethod
    def get_verifier_type(self) -> str:
        """Get the verifier type identifier."""
        pass

    @abstractmethod
    def get_platform(self) -> Platform:
        """Get the platform this verifier supports."""
        pass

    def is_configured(self) -> bool:
        """Check if the verifier has everything it needs to run."""
        return True

    def get_configuration_status(self) -> Dict[str, Any]:
        """Get configuration status for health reporting."""
        return {
            "verifier_type": self.get_verifier_type(),
            "platform": self.get_platform().value,
            "stub_mode": self.config.stub_mode,
            "configured": self.is_configured(),
        }

    def _calculate_token_hash(self, token: str) -> str:
        """Calculate SHA-256 hash of token for logging."""
        return hashlib.sha256(token.encode('utf-8')).hexdigest()

    def _reject(self, reason: str, **metadata) -> VerificationVerdict:
        return VerificationVerdict(score=0.0, reason=reason, metadata=metadata)

    def _accept(self, score: float = 1.0, reason: Optional[str] = None, **metadata) -> VerificationVerdict:
        return VerificationVerdict(score=clamp_score(score), reason=reason, metadata=metadata)

    def _log_verification_attempt(self, token_hash: str):
        """Log verification attempt for audit purposes."""
        self.logger.info(
            f"Verification attempt - Verifier: {self.get_verifier_type()}, "
            f"Platform: {self.get_platform().value}, "
            f"Token hash: {token_hash[:8]}..."
        )

    def _log_verification_result(self, verdict: VerificationVerdict, token_hash: str):
        """Log verification result for audit purposes."""
        self.logger.info(
            f"Verification result - Score: {verdict.score}, "
            f"Verifier: {self.get_verifier_type()}, "
            f"Platform: {self.get_platform().value}, "
            f"Token hash: {token_hash[:8]}..., "
            f"Reason: {verdict.reason or 'none'}"
        )
