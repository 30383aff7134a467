"""
Application settings

All environment-provided configuration lives here. Components receive the
settings through ``Depends(get_settings)`` instead of reading os.environ.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"

    # Database (docker-compose service in production)
    database_url: str = "postgresql+psycopg2://backend_user:changeme@db:5432/backend_db"

    # Single admin identity
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    # Session tokens
    session_secret: Optional[str] = None
    session_ttl_seconds: int = 60 * 60 * 24

    # Image storage
    upload_dir: str = "./uploads"
    upload_base_url: str = "http://localhost:8000/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Contact form
    contact_cooldown_seconds: int = 5 * 60

    frontend_url: Optional[str] = None

    # Outbound mail (Gmail API, OAuth refresh token flow)
    gmail_client_id: Optional[str] = None
    gmail_client_secret: Optional[str] = None
    gmail_refresh_token: Optional[str] = None
    gmail_user: Optional[str] = None
    notification_email: Optional[str] = None
    mail_sender_name: str = "Portfolio"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
