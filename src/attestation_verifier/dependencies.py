"""
FastAPI dependencies shared by the routers.
"""

from fastapi import Request

from .services.attestation import AttestationEvents, VerificationHandler


def get_verification_handler(request: Request) -> VerificationHandler:
    """Pipeline built at startup (see main.lifespan)."""
    return request.app.state.verification_handler


def get_attestation_events(request: Request) -> AttestationEvents:
    return request.app.state.attestation_events
