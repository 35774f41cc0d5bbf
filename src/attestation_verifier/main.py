"""
Attestation Verifier
FastAPI application exposing the device attestation verification endpoint.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .middleware.security_headers import SecurityHeadersMiddleware
from .routers import health, verify
from .services.attestation import AttestationConfig, AttestationEvents, VerificationHandler
from .utils.errors import http_error_handler, request_validation_handler, unhandled_error_handler

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               attestation_config: Optional[AttestationConfig] = None,
               handler: Optional[VerificationHandler] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Process settings (loaded from environment if omitted)
        attestation_config: Pipeline configuration (loaded from environment if omitted)
        handler: Prebuilt pipeline, mainly for tests with custom verifiers
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the verification pipeline once per process."""
        if handler is not None:
            app.state.verification_handler = handler
            app.state.attestation_events = handler.events
        else:
            config = attestation_config or AttestationConfig()
            config.log_config_summary()
            for issue in config.validate_config():
                logger.warning(f"Attestation configuration issue: {issue}")
            if settings.is_production and not config.is_production_ready():
                logger.error("Attestation verifiers are missing production credentials")

            events = AttestationEvents()
            app.state.verification_handler = VerificationHandler.from_config(config, events)
            app.state.attestation_events = events

        logger.info(f"Attestation verifier ready - Environment: {settings.environment}")
        yield
        logger.info("Attestation verifier shutting down")
        app.state.verification_handler.registry.shutdown()

    app = FastAPI(
        title="Attestation Verifier",
        description="""
    ## Attestation Verifier API

    Trust boundary for mobile and web clients. Clients submit a platform
    integrity assertion and receive a trust-scored session.

    ### Endpoints:
    - `POST /verify` - Verify a device attestation and issue a session
    - `GET /healthz` - Liveness, verifier status and pipeline metrics
    - `GET /readyz` - Readiness
    """,
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        SecurityHeadersMiddleware,
        environment=settings.environment,
        https_enabled=settings.https_enabled,
    )

    # Add exception handlers
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(verify.router)
    app.include_router(health.router)

    return app


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
