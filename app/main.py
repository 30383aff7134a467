"""
Portfolio API

Composes the projects, messages/contact, upload and auth routers into one
FastAPI application.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from apps.shared.config import get_settings
from apps.shared.cors import setup_cors
from apps.shared.database import Base, engine, check_db_connection
from apps.shared.errors import register_exception_handlers
from apps.shared.security_headers import setup_security_headers
from apps.auth.main import router as auth_router
from apps.messages.main import router as messages_router, contact_router
from apps.projects.main import router as projects_router
from apps.uploads.main import router as upload_router

# Models must be imported before create_all
from apps.messages import models as _message_models  # noqa: F401
from apps.projects import models as _project_models  # noqa: F401

logger = logging.getLogger("portfolio-api")
logging.basicConfig(level=logging.INFO)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables
    Base.metadata.create_all(bind=engine)
    logger.info("Portfolio API started (%s)", settings.environment)
    yield


app = FastAPI(
    title="Portfolio API",
    version="1.0.0",
    description="Portfolio projects, contact messages and admin session",
    lifespan=lifespan,
)

setup_cors(app, settings)
setup_security_headers(app, settings)
register_exception_handlers(app)


@app.get("/health")
def health():
    """Health check endpoint - returns service status and database connectivity"""
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "portfolio",
        "database": "connected" if db_connected else "disconnected",
    }


app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(messages_router)
app.include_router(contact_router)
app.include_router(upload_router)

# Uploaded images, public and read-only
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
