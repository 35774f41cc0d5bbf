"""
iOS App Attest verifier.

Scores App Attest assertions from iOS 14+ devices. In production mode the
assertion is expected as an ES256-signed JWT relayed from the app's attest
key, verified against the configured public key.
"""

import logging
import time
from typing import Dict, Any

import jwt

from .base import PlatformVerifier, Platform, VerificationVerdict, load_public_key
from .config import AttestationConfig

logger = logging.getLogger(__name__)


class AppAttestVerifier(PlatformVerifier):
    """
    Verifier for iOS App Attest assertions.

    Stub mode returns the configured placeholder score, except for
    'emulator' tokens which score 0.0 unless explicitly allowed.
    """

    def __init__(self, config: AttestationConfig):
        super().__init__(config)
        self.ios_config = config.get_ios_config()

    def get_verifier_type(self) -> str:
        return "appattest"

    def get_platform(self) -> Platform:
        return Platform.IOS

    def verify(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        token_hash = self._calculate_token_hash(integrity_token)
        self._log_verification_attempt(token_hash)

        if self.ios_config["stub_mode"]:
            verdict = self._verify_stub_mode(integrity_token)
        else:
            verdict = self._verify_production(integrity_token, device_key, nonce)

        self._log_verification_result(verdict, token_hash)
        return verdict

    def _verify_stub_mode(self, integrity_token: str) -> VerificationVerdict:
        """
        Placeholder scoring (for development and integration testing).

        Stub mode behavior:
        - Score 'emulator' tokens 0.0 if stub_allow_emulator=False
        - Score everything else with stub_score
        """
        if integrity_token.strip() == "emulator" and not self.ios_config["stub_allow_emulator"]:
            return self._reject("emulator_rejected", stub_mode=True)

        return self._accept(self.ios_config["stub_score"], "stub_accepted", stub_mode=True)

    def _verify_production(self, assertion: str, device_key: str, nonce: str) -> VerificationVerdict:
        """
        Verify the assertion signature and its claims.

        Required claims: iss (app ID), iat, exp, nonce. The optional keyId
        claim must match the device key when present.
        """
        if not self.is_configured():
            return self._reject("configuration_incomplete")

        public_key = load_public_key(self.ios_config["public_key_path"])

        try:
            claims = jwt.decode(
                assertion.strip(),
                public_key,
                algorithms=["ES256"],
                issuer=self.ios_config["app_id"],
                options={"require": ["iss", "iat", "exp", "nonce"], "verify_aud": False},
            )
        except jwt.ExpiredSignatureError:
            return self._reject("assertion_expired")
        except jwt.InvalidIssuerError:
            return self._reject("app_id_mismatch")
        except jwt.InvalidTokenError as e:
            return self._reject("assertion_invalid", detail=str(e))

        if time.time() - claims["iat"] > self.ios_config["max_token_age"]:
            return self._reject("assertion_too_old")

        if claims["nonce"] != nonce:
            return self._reject("nonce_mismatch")

        key_id = claims.get("keyId")
        if key_id is not None and key_id != device_key:
            return self._reject("device_key_mismatch")

        return self._accept(1.0, "assertion_verified", app_id=claims["iss"])

    def is_configured(self) -> bool:
        if self.ios_config["stub_mode"]:
            return True

        return all([
            self.ios_config["app_id"],
            self.ios_config["public_key_path"],
        ])

    def get_configuration_status(self) -> Dict[str, Any]:
        return {
            **super().get_configuration_status(),
            "has_app_id": bool(self.ios_config["app_id"]),
            "has_public_key": bool(self.ios_config["public_key_path"]),
            "stub_allow_emulator": self.ios_config["stub_allow_emulator"],
        }
