"""Sentralisert CORS-konfigurasjon for portefølje-API-et."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.shared.config import Settings


# Development origins (kun i dev-miljø)
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "https://localhost:3000",
]


def get_allowed_origins(settings: Settings) -> list[str]:
    """Hent liste over tillatte CORS origins basert på miljø."""
    origins = []

    # Frontend-URL fra env er den eneste produksjons-originen
    if settings.frontend_url:
        origins.append(settings.frontend_url.rstrip("/"))

    if not settings.is_production:
        origins.extend(o for o in DEV_ORIGINS if o not in origins)

    return origins


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Legg til CORS-middleware på en FastAPI-app.

    Credentials må være tillatt siden admin-sesjonen ligger i en cookie.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
