"""
Structural validation of attestation requests.
"""

from enum import Enum

from .base import Platform


class ValidationReason(str, Enum):
    """Machine-readable rejection reasons returned to clients."""
    MISSING_INTEGRITY_TOKEN = "missing_integrity_token"
    MISSING_DEVICE_KEY = "missing_device_key"
    MISSING_NONCE = "missing_nonce"
    UNKNOWN_PLATFORM = "unknown_platform"
    MALFORMED_REQUEST = "malformed_request"


class AttestationValidationError(Exception):
    """Request failed validation; carries only the reason."""

    def __init__(self, reason: ValidationReason):
        super().__init__(reason.value)
        self.reason = reason


def validate_request(request) -> Platform:
    """
    Validate an AttestationRequest and resolve its platform.

    Checks run in a fixed order (integrity token, device key, nonce,
    platform) and the first failure wins.

    Raises:
        AttestationValidationError: with the first failing reason
    """
    if not request.integrity_token.strip():
        raise AttestationValidationError(ValidationReason.MISSING_INTEGRITY_TOKEN)
    if not request.device_key.strip():
        raise AttestationValidationError(ValidationReason.MISSING_DEVICE_KEY)
    if not request.nonce.strip():
        raise AttestationValidationError(ValidationReason.MISSING_NONCE)

    try:
        return Platform(request.platform)
    except ValueError:
        raise AttestationValidationError(ValidationReason.UNKNOWN_PLATFORM)
