"""
Process-level settings for the attestation verifier service.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Do NOT use .env file in production
        env_file=None,
        case_sensitive=False,
    )

    environment: str = "development"
    https_enabled: bool = False
    log_level: str = "INFO"

    # Bind address
    verifier_host: str = "0.0.0.0"
    verifier_port: int = 3000

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
