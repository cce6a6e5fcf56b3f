"""Security middleware: response hardening headers and HTTPS redirect.

The API only speaks JSON plus uploaded media, so the CSP is strict;
map tiles and the public media host are the only external image sources.
"""

from typing import Callable
from urllib.parse import urlsplit

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from app.config import settings

MAP_TILE_HOSTS = "https://*.tile.openstreetmap.org"
# Swagger UI and ReDoc load their bundles from a CDN
DOCS_PATHS = ("/docs", "/redoc")


def _media_origin() -> str:
    parts = urlsplit(settings.public_media_url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


def build_csp() -> str:
    img_sources = " ".join(s for s in ("'self'", "data:", MAP_TILE_HOSTS, _media_origin()) if s)
    return (
        "default-src 'none'; "
        f"img-src {img_sources}; "
        "frame-ancestors 'none'; "
        "base-uri 'none'; "
        "form-action 'self';"
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # HSTS only where TLS is guaranteed
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )
        if not request.url.path.startswith(DOCS_PATHS):
            response.headers["Content-Security-Policy"] = build_csp()

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Geolocation stays allowed for "use my location" on the map step
        response.headers["Permissions-Policy"] = "microphone=(), camera=(), payment=()"

        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect HTTP requests to HTTPS (production only)."""

    def __init__(self, app, force_https: bool = False):
        super().__init__(app)
        self.force_https = force_https or settings.environment == "production"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.force_https:
            return await call_next(request)

        # Behind a TLS-terminating proxy the original scheme is forwarded
        scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
        if scheme == "http":
            return RedirectResponse(
                url=str(request.url.replace(scheme="https")),
                status_code=301,
            )

        return await call_next(request)
