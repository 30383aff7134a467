"""
Admin login / logout / session check
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel

from apps.shared.auth import (
    authenticate,
    clear_session_cookie,
    require_session,
    set_session_cookie,
)
from apps.shared.config import Settings, get_settings
from apps.shared.errors import bad_request
from apps.shared.responses import SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SessionResponse(BaseModel):
    authenticated: bool = True
    email: str


@router.post("/login", response_model=SuccessResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    """Exchange the admin credentials for a session cookie (valid 24 hours)."""
    if not credentials.email or not credentials.password:
        raise bad_request("Email and password are required")

    token = authenticate(credentials.email, credentials.password, settings)
    set_session_cookie(response, token, settings)
    logger.info("Admin logged in")
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Clear the session cookie. Tokens are stateless, so this is client-side only."""
    clear_session_cookie(response, settings)
    return SuccessResponse()


@router.get("/check", response_model=SessionResponse)
def check(admin: str = Depends(require_session)):
    return SessionResponse(email=admin)
