"""Error handling utilities for API endpoints."""

import logging

from fastapi import HTTPException
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Consistent error response format for all API errors."""

    error: str  # User-friendly message
    code: str  # Machine-readable error code
    detail: str | None = None  # Optional technical detail


class ErrorCode:
    """Machine-readable error codes."""

    # General errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Auth errors
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


def create_error_response(
    status_code: int,
    error: str,
    code: str,
    detail: str | None = None,
    endpoint: str | None = None,
    exc: Exception | None = None,
) -> HTTPException:
    """Create a consistent error response with logging."""
    log_context = {
        "error_code": code,
        "endpoint": endpoint,
    }

    if exc:
        logger.exception(
            "API error: %s (code=%s, endpoint=%s)",
            error,
            code,
            endpoint,
            extra=log_context,
        )
    else:
        logger.warning(
            "API error: %s (code=%s, endpoint=%s)",
            error,
            code,
            endpoint,
            extra=log_context,
        )

    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, code=code, detail=detail).model_dump(),
    )
