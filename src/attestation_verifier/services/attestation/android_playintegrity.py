"""
Android Play Integrity verifier.

Scores Play Integrity tokens by decoding them through Google's Play
Integrity API and grading the device and app verdicts.
"""

import logging
import time
from typing import Optional, Dict, Any

import httpx

from .base import PlatformVerifier, Platform, VerificationVerdict
from .config import AttestationConfig

logger = logging.getLogger(__name__)

# Strongest verdict wins.
DEVICE_VERDICT_SCORES = (
    ("MEETS_STRONG_INTEGRITY", 1.0),
    ("MEETS_DEVICE_INTEGRITY", 0.9),
    ("MEETS_BASIC_INTEGRITY", 0.4),
)


class PlayIntegrityVerifier(PlatformVerifier):
    """
    Verifier for Android Play Integrity tokens.

    Stub mode returns the configured placeholder score, except for
    'emulator' tokens which score 0.0 unless explicitly allowed.
    """

    PLAY_INTEGRITY_API_URL = "https://playintegrity.googleapis.com/v1/{package_name}:decodeIntegrityToken"

    def __init__(self, config: AttestationConfig):
        super().__init__(config)
        self.android_config = config.get_android_config()

    def get_verifier_type(self) -> str:
        return "playintegrity"

    def get_platform(self) -> Platform:
        return Platform.ANDROID

    def verify(self, integrity_token: str, device_key: str, nonce: str) -> VerificationVerdict:
        token_hash = self._calculate_token_hash(integrity_token)
        self._log_verification_attempt(token_hash)

        if self.android_config["stub_mode"]:
            verdict = self._verify_stub_mode(integrity_token)
        else:
            verdict = self._verify_production(integrity_token, nonce)

        self._log_verification_result(verdict, token_hash)
        return verdict

    def _verify_stub_mode(self, integrity_token: str) -> VerificationVerdict:
        """
        Placeholder scoring (for development and integration testing).

        Stub mode behavior:
        - Score 'emulator' tokens 0.0 if stub_allow_emulator=False
        - Score everything else with stub_score
        """
        if integrity_token.strip() == "emulator" and not self.android_config["stub_allow_emulator"]:
            return self._reject("emulator_rejected", stub_mode=True)

        return self._accept(self.android_config["stub_score"], "stub_accepted", stub_mode=True)

    def _verify_production(self, integrity_token: str, nonce: str) -> VerificationVerdict:
        if not self.is_configured():
            return self._reject("configuration_incomplete")

        try:
            decoded = self._decode_integrity_token(integrity_token.strip())
        except httpx.RequestError as e:
            return self._reject("api_unreachable", detail=str(e))

        if decoded is None:
            return self._reject("api_error")

        payload = decoded.get("tokenPayloadExternal")
        if not payload:
            return self._reject("payload_missing")

        return self._score_payload(payload, nonce)

    def _decode_integrity_token(self, integrity_token: str) -> Optional[Dict[str, Any]]:
        """
        Decode a Play Integrity token using Google's API.

        Returns:
            Decoded token data or None on a non-200 response
        """
        url = self.PLAY_INTEGRITY_API_URL.format(package_name=self.android_config["package_name"])

        headers = {
            "Authorization": f"Bearer {self.android_config['access_token']}",
            "Content-Type": "application/json"
        }

        with httpx.Client(timeout=self.config.api_timeout) as client:
            response = client.post(url, json={"integrityToken": integrity_token}, headers=headers)

        if response.status_code != 200:
            logger.error(f"Play Integrity API error: {response.status_code} - {response.text}")
            return None
        return response.json()

    def _score_payload(self, payload: Dict[str, Any], nonce: str) -> VerificationVerdict:
        """
        Grade a decoded token payload.

        The request nonce must match and the token must be fresh. The device
        verdict sets the base score; an app that Play does not recognise
        halves it.
        """
        request_details = payload.get("requestDetails", {})

        if request_details.get("nonce") != nonce:
            return self._reject("nonce_mismatch")

        package_name = self.android_config["package_name"]
        if package_name and request_details.get("requestPackageName") != package_name:
            return self._reject("package_mismatch")

        timestamp_millis = request_details.get("timestampMillis")
        if timestamp_millis is not None:
            age = time.time() - int(timestamp_millis) / 1000
            if age > self.config.max_token_age:
                return self._reject("token_too_old")

        device_verdicts = payload.get("deviceIntegrity", {}).get("deviceRecognitionVerdict", [])
        score = 0.0
        for verdict, verdict_score in DEVICE_VERDICT_SCORES:
            if verdict in device_verdicts:
                score = verdict_score
                break

        if score == 0.0:
            return self._reject("device_integrity_failed", device_verdicts=device_verdicts)

        app_verdict = payload.get("appIntegrity", {}).get("appRecognitionVerdict")
        if app_verdict != "PLAY_RECOGNIZED":
            score = score / 2

        return self._accept(
            score,
            "verdict_scored",
            device_verdicts=device_verdicts,
            app_verdict=app_verdict,
        )

    def is_configured(self) -> bool:
        if self.android_config["stub_mode"]:
            return True

        return all([
            self.android_config["package_name"],
            self.android_config["access_token"],
        ])

    def get_configuration_status(self) -> Dict[str, Any]:
        return {
            **super().get_configuration_status(),
            "has_package_name": bool(self.android_config["package_name"]),
            "has_access_token": bool(self.android_config["access_token"]),
            "stub_allow_emulator": self.android_config["stub_allow_emulator"],
        }
