"""Sikkerhetsheaders for API-et."""

from fastapi import FastAPI, Request
from fastapi.responses import Response

from apps.shared.config import Settings


# JSON-only API; uploaded images are served from /uploads
DEFAULT_CSP = "default-src 'none'; img-src 'self'; frame-ancestors 'none'"

UPLOADS_PREFIX = "/uploads"


def setup_security_headers(app: FastAPI, settings: Settings) -> None:
    """Legg til CSP, nosniff, X-Frame-Options, Cache-Control og (i prod) HSTS."""

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", DEFAULT_CSP)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")

        # Bilder kan caches, API-svar skal ikke
        if not request.url.path.startswith(UPLOADS_PREFIX):
            response.headers.setdefault(
                "Cache-Control",
                "no-cache, no-store, must-revalidate",
            )

        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response
