"""
Secure Error Handling

Provides utilities for handling errors securely without leaking sensitive information,
and the exception handlers that give every endpoint the same error payload.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Image upload")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    # Log full error server-side
    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def error_response(message: str, category: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
    )


def bad_request(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "category": "client_error"},
    )


def not_found(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": message, "category": "client_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = sorted({
            ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            for err in exc.errors()
        })
        message = "Invalid request"
        if any(fields):
            message = f"Invalid request: {', '.join(f for f in fields if f)}"
        return error_response(
            message=message,
            category="client_error",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        _, error_id = log_and_sanitize_error(exc, f"Database access on {request.url.path}")
        return error_response(
            message=f"A database error occurred while processing the request. (Error ID: {error_id})",
            category="database",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        message = (
            detail.get("message") if isinstance(detail, dict) else str(detail)
        ) or "Request failed."
        category = (
            detail.get("category") if isinstance(detail, dict) else None
        )

        if not category:
            if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
                category = "security"
            elif exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
                category = "rate_limit"
            elif exc.status_code >= 500:
                category = "server_error"
            else:
                category = "client_error"

        return error_response(
            message=message,
            category=category,
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        log_and_sanitize_error(exc, f"Request to {request.url.path}")
        return error_response(
            message="An unexpected server error occurred. Please try again later.",
            category="server_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
