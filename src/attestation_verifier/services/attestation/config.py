"""
Configuration management for the attestation verification pipeline.
"""

import os
import logging
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

logger = logging.getLogger(__name__)

DEVELOPMENT_NULLIFIER_SECRET = "development-nullifier-secret-do-not-deploy"


class AttestationConfig(BaseSettings):
    """
    Configuration for the attestation verification pipeline.

    Loads from ATTESTATION_* environment variables with defaults suitable
    for local development (stub verifiers, development nullifier secret).
    """

    model_config = SettingsConfigDict(
        env_prefix="ATTESTATION_",
        env_file=None,  # Don't use .env files in production
        case_sensitive=False,
        validate_default=True,
    )

    # Feature flags
    stub_mode: bool = Field(default=True, description="Use placeholder verifiers instead of vendor verification")
    stub_allow_emulator: bool = Field(default=False, description="Score 'emulator' tokens like any other stub token")
    stub_score: float = Field(default=0.5, ge=0.0, le=1.0, description="Placeholder score for iOS/Android stubs")
    sentinel_token: str = Field(default="test-token", description="Web integrity token trusted by the sentinel verifier")

    # Trust decision
    trust_threshold: float = Field(default=0.5, ge=0.0, le=1.0, description="Minimum score for a trusted decision")

    # Timeouts (seconds)
    verifier_timeout: float = Field(default=5.0, gt=0, description="Upper bound on a single platform evaluation")
    api_timeout: float = Field(default=3.0, gt=0, description="HTTP timeout for vendor API calls")
    max_token_age: int = Field(default=300, gt=0, description="Maximum age of a signed integrity token")

    # Concurrency
    verifier_workers: int = Field(default=8, ge=1, description="Worker threads per platform for verifier calls")

    # Session issuance
    nullifier_secret: str = Field(default=DEVELOPMENT_NULLIFIER_SECRET, description="HMAC key for device nullifiers")

    # iOS App Attest configuration
    apple_app_id: Optional[str] = None
    apple_public_key_path: Optional[str] = None

    # Android Play Integrity configuration
    google_access_token: Optional[str] = None
    android_package_name: Optional[str] = None

    # Web attestation configuration
    web_public_key_path: Optional[str] = None
    web_audience: Optional[str] = None

    @field_validator("nullifier_secret")
    @classmethod
    def validate_nullifier_secret(cls, v: str) -> str:
        """Nullifiers are only as strong as the HMAC key behind them."""
        if len(v) < 32:
            raise ValueError(
                f"nullifier_secret must be at least 32 characters "
                f"(current: {len(v)}). Generate with: openssl rand -hex 32"
            )
        if os.getenv("ENVIRONMENT", "development") == "production" and v == DEVELOPMENT_NULLIFIER_SECRET:
            raise ValueError(
                "The development nullifier secret is FORBIDDEN in production. "
                "Set ATTESTATION_NULLIFIER_SECRET in environment."
            )
        return v

    @field_validator("stub_mode")
    @classmethod
    def block_stub_mode_in_production(cls, v: bool) -> bool:
        """Stub verifiers accept forged tokens; never run them in production."""
        if os.getenv("ENVIRONMENT", "development") == "production" and v:
            raise ValueError(
                "stub_mode=True is FORBIDDEN in production. "
                "Set ATTESTATION_STUB_MODE=false in environment."
            )
        return v

    def is_production_ready(self) -> bool:
        """
        Check if configuration is ready for production use.

        Returns:
            True if every platform verifier has its credentials
        """
        if self.stub_mode:
            return True
        return not self.validate_config()

    def get_ios_config(self) -> dict:
        """Get iOS-specific configuration."""
        return {
            "app_id": self.apple_app_id,
            "public_key_path": self.apple_public_key_path,
            "max_token_age": self.max_token_age,
            "stub_mode": self.stub_mode,
            "stub_allow_emulator": self.stub_allow_emulator,
            "stub_score": self.stub_score,
        }

    def get_android_config(self) -> dict:
        """Get Android-specific configuration."""
        return {
            "access_token": self.google_access_token,
            "package_name": self.android_package_name,
            "stub_mode": self.stub_mode,
            "stub_allow_emulator": self.stub_allow_emulator,
            "stub_score": self.stub_score,
        }

    def get_web_config(self) -> dict:
        """Get web-specific configuration."""
        return {
            "public_key_path": self.web_public_key_path,
            "audience": self.web_audience,
            "max_token_age": self.max_token_age,
            "sentinel_token": self.sentinel_token,
            "stub_mode": self.stub_mode,
        }

    def validate_config(self) -> list[str]:
        """
        Validate configuration and return list of issues.

        Returns:
            List of configuration issues (empty if valid)
        """
        issues = []

        if self.stub_mode:
            logger.info("Attestation running in stub mode - no credential validation needed")
            return issues

        if not self.apple_app_id:
            issues.append("ATTESTATION_APPLE_APP_ID is required for iOS App Attest")
        if not self.apple_public_key_path:
            issues.append("ATTESTATION_APPLE_PUBLIC_KEY_PATH is required for iOS App Attest")
        if not self.android_package_name:
            issues.append("ATTESTATION_ANDROID_PACKAGE_NAME is required for Play Integrity")
        if not self.google_access_token:
            issues.append("ATTESTATION_GOOGLE_ACCESS_TOKEN is required for Play Integrity")
        if not self.web_public_key_path:
            issues.append("ATTESTATION_WEB_PUBLIC_KEY_PATH is required for web attestation")

        return issues

    def log_config_summary(self):
        """Log configuration summary for debugging."""
        logger.info(f"Attestation config - Stub mode: {self.stub_mode}, "
                   f"Trust threshold: {self.trust_threshold}, "
                   f"Verifier timeout: {self.verifier_timeout}s, "
                   f"Workers per platform: {self.verifier_workers}, "
                   f"API timeout: {self.api_timeout}s")

        if not self.stub_mode:
            logger.info(f"iOS config - App ID: {self.apple_app_id}, "
                       f"Public key: {'configured' if self.apple_public_key_path else 'not configured'}")
            logger.info(f"Android config - Package: {self.android_package_name}, "
                       f"Access token: {'configured' if self.google_access_token else 'not configured'}")
            logger.info(f"Web config - Public key: {'configured' if self.web_public_key_path else 'not configured'}, "
                       f"Audience: {self.web_audience or 'any'}")
