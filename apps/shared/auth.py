"""
Admin Session Authentication

Single admin identity, compared against ADMIN_EMAIL / ADMIN_PASSWORD.
A successful login issues a signed session token that travels in an
http-only cookie; every admin-only endpoint depends on ``require_session``.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.responses import Response
from fastapi.security import APIKeyCookie

from apps.shared.config import Settings, get_settings
from apps.shared.session_token import create_session_token, verify_session_token

# Setup logging
logger = logging.getLogger(__name__)

# Session cookie name
SESSION_COOKIE = "admin_token"

# FastAPI dependency for the session cookie
session_cookie = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)


def unauthorized(message: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "message": message,
            "category": "security",
        },
    )


def authenticate(email: str, password: str, settings: Settings) -> str:
    """
    Check the admin credentials and issue a session token.

    Raises:
        HTTPException: 401 on any mismatch (wrong email and wrong password look the same)
    """
    if not settings.admin_email or not settings.admin_password:
        logger.warning(
            "Admin login attempted but ADMIN_EMAIL / ADMIN_PASSWORD are not configured"
        )
        raise unauthorized("Invalid credentials")

    # Use constant-time comparison to prevent timing attacks
    email_ok = hmac.compare_digest(email.encode(), settings.admin_email.encode())
    password_ok = hmac.compare_digest(password.encode(), settings.admin_password.encode())

    if not (email_ok and password_ok):
        logger.info("Rejected admin login")
        raise unauthorized("Invalid credentials")

    return create_session_token(email, settings.session_secret)


def verify(token: Optional[str], settings: Settings) -> Optional[str]:
    """Return the admin identity for a token, or None when there is no valid session."""
    return verify_session_token(token, settings.session_secret, settings.session_ttl_seconds)


async def require_session(
    token: Optional[str] = Security(session_cookie),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Dependency to require a valid admin session

    Usage in endpoints:
    @router.get("/protected")
    def protected_endpoint(admin: str = Depends(require_session)):
        # This endpoint requires a logged in admin
        pass
    """
    identity = verify(token, settings)
    if identity is None:
        raise unauthorized()
    return identity


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
