"""
Pytest configuration and fixtures for the attestation verifier tests.
"""

import os
import time

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient

from attestation_verifier.config import Settings
from attestation_verifier.main import create_app
from attestation_verifier.services.attestation import AttestationConfig

TEST_NULLIFIER_SECRET = "test-nullifier-secret-0123456789abcdef"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host environment variables out of the settings under test."""
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    for name in list(os.environ):
        if name.startswith("ATTESTATION_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    """Stub-mode configuration."""
    return AttestationConfig(
        stub_mode=True,
        stub_allow_emulator=False,
        nullifier_secret=TEST_NULLIFIER_SECRET,
    )


@pytest.fixture
def signing_key():
    """EC P-256 private key standing in for a platform attestation signer."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def public_key_path(tmp_path, signing_key):
    """PEM file with the signer's public key."""
    path = tmp_path / "attestation_public_key.pem"
    path.write_bytes(
        signing_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return str(path)


@pytest.fixture
def make_signed_token(signing_key):
    """Factory for ES256 tokens with sensible default claims."""
    def _make(key=None, **claims):
        now = int(time.time())
        payload = {"iat": now, "exp": now + 300, **claims}
        return jwt.encode(payload, key or signing_key, algorithm="ES256")
    return _make


@pytest.fixture
def client(config):
    """Test client running the app lifespan with the stub configuration."""
    app = create_app(Settings(), attestation_config=config)
    with TestClient(app) as test_client:
        yield test_client
