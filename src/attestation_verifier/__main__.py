"""
Process entry point: ``python -m attestation_verifier``.
"""

import logging

import uvicorn

from .config import Settings
from .main import configure_logging, create_app

logger = logging.getLogger(__name__)


def main():
    settings = Settings()
    configure_logging(settings)

    logger.info(f"Attestation verifier listening on {settings.verifier_host}:{settings.verifier_port}")
    uvicorn.run(
        create_app(settings),
        host=settings.verifier_host,
        port=settings.verifier_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
