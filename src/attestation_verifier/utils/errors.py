"""
Standardized error responses for the attestation verifier.

Every error leaves the service as {"success": false, "error": <reason>};
internal details are logged, never returned.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

ERROR_REGISTRY = {
    400: "malformed_request",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    415: "unsupported_media_type",
    500: "internal_error",
}


def error_response(status_code: int, reason: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": reason})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Standardized handler for HTTP exceptions (404, 405, ...)."""
    reason = ERROR_REGISTRY.get(exc.status_code)
    if reason is None:
        reason = "internal_error" if exc.status_code >= 500 else "bad_request"
    return error_response(exc.status_code, reason)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Undecodable bodies are client errors."""
    logger.info(f"Malformed request to {request.url.path}: {len(exc.errors())} validation error(s)")
    return error_response(400, "malformed_request")


async def unhandled_error_handler(request: Request, exc: Exception):
    """Last-resort handler; never leaks internals."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    return error_response(500, "internal_error")
