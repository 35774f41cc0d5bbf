"""
Unit tests for attestation request validation.
"""

import pytest
from pydantic import ValidationError

from attestation_verifier.schemas.attestation import AttestationRequest
from attestation_verifier.services.attestation.base import Platform
from attestation_verifier.services.attestation.validator import (
    AttestationValidationError,
    ValidationReason,
    validate_request,
)


def make_request(**overrides):
    fields = {
        "platform": "web",
        "integrityToken": "test-token",
        "deviceKey": "device-key-1",
        "nonce": "nonce-1",
        **overrides,
    }
    return AttestationRequest.model_validate(fields)


class TestValidateRequest:
    """Test cases for validate_request."""

    @pytest.mark.parametrize("platform", ["ios", "android", "web"])
    def test_valid_request_resolves_platform(self, platform):
        assert validate_request(make_request(platform=platform)) == Platform(platform)

    @pytest.mark.parametrize("field, reason", [
        ("integrityToken", ValidationReason.MISSING_INTEGRITY_TOKEN),
        ("deviceKey", ValidationReason.MISSING_DEVICE_KEY),
        ("nonce", ValidationReason.MISSING_NONCE),
    ])
    @pytest.mark.parametrize("value", ["", "   ", "\t\n"])
    def test_empty_or_whitespace_field_rejected(self, field, reason, value):
        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(make_request(**{field: value}))

        assert exc_info.value.reason == reason

    def test_missing_field_treated_as_empty(self):
        request = AttestationRequest.model_validate({"platform": "ios", "integrityToken": "t", "nonce": "n"})

        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(request)

        assert exc_info.value.reason == ValidationReason.MISSING_DEVICE_KEY

    @pytest.mark.parametrize("platform", ["windows", "IOS", " web", "", "null"])
    def test_unknown_platform_rejected(self, platform):
        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(make_request(platform=platform))

        assert exc_info.value.reason == ValidationReason.UNKNOWN_PLATFORM

    def test_check_order_integrity_token_first(self):
        request = make_request(platform="bogus", integrityToken="", deviceKey="", nonce="")

        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(request)

        assert exc_info.value.reason == ValidationReason.MISSING_INTEGRITY_TOKEN

    def test_check_order_device_key_before_nonce(self):
        request = make_request(platform="bogus", deviceKey=" ", nonce="")

        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(request)

        assert exc_info.value.reason == ValidationReason.MISSING_DEVICE_KEY

    def test_check_order_nonce_before_platform(self):
        request = make_request(platform="bogus", nonce="")

        with pytest.raises(AttestationValidationError) as exc_info:
            validate_request(request)

        assert exc_info.value.reason == ValidationReason.MISSING_NONCE

    def test_request_is_immutable(self):
        request = make_request()

        with pytest.raises(ValidationError):
            request.nonce = "other"

    def test_validation_does_not_modify_request(self):
        request = make_request(integrityToken="  padded  ")

        validate_request(request)

        assert request.integrity_token == "  padded  "
