"""
Pydantic schemas for attestation verification requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttestationRequest(BaseModel):
    """
    Inbound attestation assertion.

    Fields use camelCase on the wire. Missing or null fields become empty
    strings so the validator reports them with a specific reason; platform
    stays a raw string until the validator resolves it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    platform: str = Field("", description="Client platform: 'ios', 'android' or 'web'")
    integrity_token: str = Field("", alias="integrityToken", description="Platform attestation blob")
    device_key: str = Field("", alias="deviceKey", description="Device public key identifier")
    nonce: str = Field("", description="Freshness token agreed with the server")

    @field_validator("integrity_token", "device_key", "nonce", mode="before")
    @classmethod
    def null_as_missing(cls, v):
        return "" if v is None else v

    @field_validator("platform", mode="before")
    @classmethod
    def non_string_platform_as_unknown(cls, v):
        # Any non-string platform is simply not one of the known names
        return v if isinstance(v, str) else ""


class VerificationResponse(BaseModel):
    """Successful verification: a session bound to the attested device."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true for issued sessions")
    token: str = Field(..., description="Opaque session token")
    trust_score: float = Field(..., alias="trustScore", ge=0.0, le=1.0, description="Trust score 0.0-1.0")
    nullifier: str = Field(..., description="Stable per-device identifier")
    issued_at: int = Field(..., alias="issuedAt", ge=0, description="Issuance time, Unix seconds")


class ErrorResponse(BaseModel):
    """Rejected or failed verification."""

    success: bool = Field(False, description="Always false")
    error: str = Field(..., description="Machine-readable reason")
