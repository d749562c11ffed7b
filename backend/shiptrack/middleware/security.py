"""Response-header middleware.

SecurityHeadersMiddleware  hardening headers on every response
PublicCORSMiddleware       wide-open CORS for the public tracking endpoint
"""

from typing import Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shiptrack.config import settings
from shiptrack.middleware.exceptions import general_exception_handler

PUBLIC_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Force HTTPS for 1 year, include subdomains
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class PublicCORSMiddleware(BaseHTTPMiddleware):
    """Answer preflight and stamp CORS headers on public paths.

    The tracking widget is embedded on third-party pages, so these paths
    accept any origin.  Every response on them, errors included, carries
    the same headers; any OPTIONS request gets an empty 200.  Must be
    added after CORSMiddleware so it runs first.
    """

    def __init__(self, app, paths: Iterable[str]):
        super().__init__(app)
        self.paths = tuple(paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.rstrip("/") not in self.paths:
            return await call_next(request)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PUBLIC_CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception as exc:
            # ServerErrorMiddleware sits outside this middleware, so the 500
            # is rendered here for it to carry the CORS headers.
            response = await general_exception_handler(request, exc)
        for name, value in PUBLIC_CORS_HEADERS.items():
            response.headers[name] = value
        return response
