"""
Web attestation verifiers.

The sentinel verifier trusts exactly one configured token and exists for
integration testing without a real web integrity provider.
"""

import logging
import time
from typing import Dict, Any

import jwt

from .base import PlatformVerifier, Platform, VerificationVerdict, load_public_key
from .config import AttestationConfig

logger = logging.getLogger(__name__)


class SentinelVerifier(PlatformVerifier):
    """Scores 1.0 for the sentinel token and 0.0 for anything else."""

    def __init__(self, config: AttestationConfig):
        super().__init__(config)
        self.sentinel_token = config.sentinel_token

    def get_verifier_type(self) -> str:
        return "sentinel"

    def get_platform(self) -> Platform:
        return Platform.WEB

    def verify(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        token_hash = self._calculate_token_hash(integrity_token)
        self._log_verification_attempt(token_hash)

        if integrity_token.strip() == self.sentinel_token:
            verdict = self._accept(1.0, "sentinel_matched", stub_mode=True)
        else:
            verdict = self._reject("sentinel_mismatch", stub_mode=True)

        self._log_verification_result(verdict, token_hash)
        return verdict


class WebTokenVerifier(PlatformVerifier):
    """
    Verifier for signed web integrity tokens.

    Expects an ES256 JWT issued by the configured web integrity provider,
    bound to the request through its nonce and sub (device key) claims.
    """

    def __init__(self, config: AttestationConfig):
        super().__init__(config)
        self.web_config = config.get_web_config()

    def get_verifier_type(self) -> str:
        return "webtoken"

    def get_platform(self) -> Platform:
        return Platform.WEB

    def verify(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        token_hash = self._calculate_token_hash(integrity_token)
        self._log_verification_attempt(token_hash)

        verdict = self._verify_signed_token(integrity_token, device_key, nonce)

        self._log_verification_result(verdict, token_hash)
        return verdict

    def _verify_signed_token(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        if not self.is_configured():
            return self._reject("configuration_incomplete")

        public_key = load_public_key(self.web_config["public_key_path"])
        audience = self.web_config["audience"]

        try:
            claims = jwt.decode(
                integrity_token.strip(),
                public_key,
                algorithms=["ES256"],
                audience=audience,
                options={"require": ["iat", "exp", "nonce", "sub"], "verify_aud": audience is not None},
            )
        except jwt.ExpiredSignatureError:
            return self._reject("token_expired")
        except jwt.InvalidAudienceError:
            return self._reject("audience_mismatch")
        except jwt.InvalidTokenError as e:
            return self._reject("token_invalid", detail=str(e))

        if time.time() - claims["iat"] > self.web_config["max_token_age"]:
            return self._reject("token_too_old")

        if claims["nonce"] != nonce:
            return self._reject("nonce_mismatch")

        if claims["sub"] != device_key:
            return self._reject("device_key_mismatch")

        return self._accept(1.0, "token_verified")

    def is_configured(self) -> bool:
        return bool(self.web_config["public_key_path"])

    def get_configuration_status(self) -> Dict[str, Any]:
        return {
            **super().get_configuration_status(),
            "has_public_key": bool(self.web_config["public_key_path"]),
            "has_audience": bool(self.web_config["audience"]),
        }
