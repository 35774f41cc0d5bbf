"""
Device Attestation Verification Package

Validates attestation requests, scores them with a platform-specific
verifier and issues trust-scored sessions.

Supported platforms:
- iOS: App Attest
- Android: Play Integrity API
- Web: signed web integrity tokens (sentinel verifier in stub mode)
"""

from .base import Platform, PlatformVerifier, TrustDecision, VerificationVerdict
from .config import AttestationConfig
from .events import AttestationEvents
from .validator import AttestationValidationError, ValidationReason, validate_request
from .registry import PlatformVerifierRegistry, VerifierUnavailableError
from .session import SessionArtifact, SessionIssuer
from .handler import RequestState, VerificationHandler, VerificationOutcome

# Platform verifiers
from .ios_appattest import AppAttestVerifier
from .android_playintegrity import PlayIntegrityVerifier
from .web import SentinelVerifier, WebTokenVerifier

__all__ = [
    # Core interfaces
    "Platform",
    "PlatformVerifier",
    "TrustDecision",
    "VerificationVerdict",
    "AttestationConfig",
    "AttestationEvents",
    "AttestationValidationError",
    "ValidationReason",
    "validate_request",
    "PlatformVerifierRegistry",
    "VerifierUnavailableError",
    "SessionArtifact",
    "SessionIssuer",
    "RequestState",
    "VerificationHandler",
    "VerificationOutcome",

    # Platform verifiers
    "AppAttestVerifier",
    "PlayIntegrityVerifier",
    "SentinelVerifier",
    "WebTokenVerifier",
]
