"""
Unit tests for Android Play Integrity verifier.
"""

import time

import pytest
from unittest.mock import Mock, patch
import httpx

from attestation_verifier.services.attestation.base import Platform
from attestation_verifier.services.attestation.android_playintegrity import PlayIntegrityVerifier

PACKAGE = "com.example.app"


def decoded_token(nonce="nonce-1", device_verdicts=("MEETS_DEVICE_INTEGRITY",),
                  app_verdict="PLAY_RECOGNIZED", package=PACKAGE, timestamp_millis=None):
    if timestamp_millis is None:
        timestamp_millis = int(time.time() * 1000)
    return {
        "tokenPayloadExternal": {
            "requestDetails": {
                "requestPackageName": package,
                "nonce": nonce,
                "timestampMillis": str(timestamp_millis),
            },
            "appIntegrity": {"appRecognitionVerdict": app_verdict},
            "deviceIntegrity": {"deviceRecognitionVerdict": list(device_verdicts)},
        }
    }


def mock_google_response(mock_client, status_code=200, body=None):
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.json.return_value = body
    mock_response.text = "error" if status_code != 200 else "OK"

    mock_client_instance = Mock()
    mock_client_instance.post.return_value = mock_response
    mock_client.return_value.__enter__.return_value = mock_client_instance
    return mock_client_instance


class TestPlayIntegrityVerifier:
    """Test cases for PlayIntegrityVerifier."""

    @pytest.fixture
    def verifier(self, config):
        return PlayIntegrityVerifier(config)

    @pytest.fixture
    def production_verifier(self, config):
        config.stub_mode = False
        config.android_package_name = PACKAGE
        config.google_access_token = "test-access-token"
        return PlayIntegrityVerifier(config)

    def test_get_verifier_type(self, verifier):
        assert verifier.get_verifier_type() == "playintegrity"

    def test_get_platform(self, verifier):
        assert verifier.get_platform() == Platform.ANDROID

    def test_stub_mode_placeholder_score(self, verifier):
        verdict = verifier.verify("valid_token", "device", "nonce")

        assert verdict.score == 0.5
        assert verdict.metadata["stub_mode"] is True

    def test_stub_mode_emulator_rejected(self, verifier):
        verdict = verifier.verify(" emulator ", "device", "nonce")

        assert verdict.score == 0.0
        assert verdict.reason == "emulator_rejected"

    def test_stub_mode_emulator_allowed(self, config):
        config.stub_allow_emulator = True
        verifier = PlayIntegrityVerifier(config)

        assert verifier.verify("emulator", "device", "nonce").score == 0.5

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_device_integrity(self, mock_client, production_verifier):
        client = mock_google_response(mock_client, body=decoded_token())

        verdict = production_verifier.verify("integrity-token", "device", "nonce-1")

        assert verdict.score == 0.9
        assert verdict.reason == "verdict_scored"
        url = client.post.call_args.args[0]
        assert url == f"https://playintegrity.googleapis.com/v1/{PACKAGE}:decodeIntegrityToken"
        assert client.post.call_args.kwargs["json"] == {"integrityToken": "integrity-token"}
        assert client.post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-access-token"

    @pytest.mark.parametrize("device_verdicts, expected", [
        (("MEETS_BASIC_INTEGRITY", "MEETS_DEVICE_INTEGRITY", "MEETS_STRONG_INTEGRITY"), 1.0),
        (("MEETS_BASIC_INTEGRITY", "MEETS_DEVICE_INTEGRITY"), 0.9),
        (("MEETS_BASIC_INTEGRITY",), 0.4),
    ])
    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_verdict_scores(self, mock_client, production_verifier, device_verdicts, expected):
        mock_google_response(mock_client, body=decoded_token(device_verdicts=device_verdicts))

        assert production_verifier.verify("t", "device", "nonce-1").score == expected

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_no_device_verdict(self, mock_client, production_verifier):
        mock_google_response(mock_client, body=decoded_token(device_verdicts=()))

        verdict = production_verifier.verify("t", "device", "nonce-1")

        assert verdict.score == 0.0
        assert verdict.reason == "device_integrity_failed"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_unrecognized_app_halves_score(self, mock_client, production_verifier):
        mock_google_response(mock_client, body=decoded_token(app_verdict="UNRECOGNIZED_VERSION"))

        verdict = production_verifier.verify("t", "device", "nonce-1")

        assert verdict.score == pytest.approx(0.45)
        assert verdict.metadata["app_verdict"] == "UNRECOGNIZED_VERSION"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_nonce_mismatch(self, mock_client, production_verifier):
        mock_google_response(mock_client, body=decoded_token(nonce="other"))

        verdict = production_verifier.verify("t", "device", "nonce-1")

        assert verdict.score == 0.0
        assert verdict.reason == "nonce_mismatch"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_package_mismatch(self, mock_client, production_verifier):
        mock_google_response(mock_client, body=decoded_token(package="com.evil.app"))

        assert production_verifier.verify("t", "device", "nonce-1").reason == "package_mismatch"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_stale_token(self, mock_client, production_verifier):
        stale = int((time.time() - 3600) * 1000)
        mock_google_response(mock_client, body=decoded_token(timestamp_millis=stale))

        assert production_verifier.verify("t", "device", "nonce-1").reason == "token_too_old"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_api_error(self, mock_client, production_verifier):
        mock_google_response(mock_client, status_code=403)

        verdict = production_verifier.verify("t", "device", "nonce-1")

        assert verdict.score == 0.0
        assert verdict.reason == "api_error"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_api_unreachable(self, mock_client, production_verifier):
        client = Mock()
        client.post.side_effect = httpx.ConnectError("connection refused")
        mock_client.return_value.__enter__.return_value = client

        verdict = production_verifier.verify("t", "device", "nonce-1")

        assert verdict.score == 0.0
        assert verdict.reason == "api_unreachable"

    @patch('attestation_verifier.services.attestation.android_playintegrity.httpx.Client')
    def test_production_payload_missing(self, mock_client, production_verifier):
        mock_google_response(mock_client, body={})

        assert production_verifier.verify("t", "device", "nonce-1").reason == "payload_missing"

    def test_production_missing_configuration(self, config):
        config.stub_mode = False
        verifier = PlayIntegrityVerifier(config)

        assert verifier.verify("t", "device", "nonce-1").reason == "configuration_incomplete"
        assert verifier.get_configuration_status()["configured"] is False
