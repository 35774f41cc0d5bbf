"""
Security headers middleware per OWASP recommendations for JSON APIs.
"""

import logging

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    """
    Add security headers to all responses.
    Responses are JSON only, so the CSP denies everything; session tokens
    must never be cached by intermediaries.

    Plain ASGI middleware: `receive` reaches the endpoint untouched, so
    routes still observe `http.disconnect` when the client goes away.
    """

    def __init__(self, app: ASGIApp, environment: str = "development", https_enabled: bool = False):
        self.app = app
        self.enable_hsts = environment == "production" and https_enabled

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)

                headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

                # Prevent clickjacking
                headers["X-Frame-Options"] = "DENY"

                # Prevent MIME type sniffing
                headers["X-Content-Type-Options"] = "nosniff"

                headers["Referrer-Policy"] = "no-referrer"

                # Session tokens and nullifiers must not be cached
                headers["Cache-Control"] = "no-store"

                # HSTS - enforce HTTPS (production with HTTPS configured)
                if self.enable_hsts:
                    headers["Strict-Transport-Security"] = (
                        "max-age=31536000; includeSubDomains; preload"
                    )

                logger.debug(f"Security headers added to {scope['path']}")
            await send(message)

        await self.app(scope, receive, send_with_headers)
