"""
Application-level exception types and boundary error handling.

Every request-level failure is converted to a short, human-readable
message and an HTTP status code by handle_api_error(). The original
exception is only ever logged server-side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class AppError(Exception):
    """Base exception carrying an HTTP status for the boundary layer.

    Attributes:
        status_code: HTTP status the boundary should respond with
        code: Optional machine-readable error code
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ConfigurationError(AppError):
    """Raised when required settings are missing or invalid at startup."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message, status_code=500, code="configuration_error")
        self.missing = missing or []


@dataclass(frozen=True)
class ApiError:
    """A boundary-ready error description."""

    message: str
    status_code: int


def handle_api_error(error: BaseException) -> ApiError:
    """Map an exception to a user-displayable message and status code.

    Args:
        error: Exception raised while handling a request

    Returns:
        ApiError with message and status code
    """
    if isinstance(error, AppError):
        return ApiError(message=str(error) or DEFAULT_ERROR_MESSAGE, status_code=error.status_code)

    if isinstance(error, Exception):
        return ApiError(message=str(error) or DEFAULT_ERROR_MESSAGE, status_code=500)

    return ApiError(message=DEFAULT_ERROR_MESSAGE, status_code=500)


def log_error(error: BaseException, context: Optional[str] = None) -> None:
    """Log an exception with traceback and an optional context label."""
    prefix = f"[{context}] " if context else ""
    logger.error(
        f"{prefix}Error: {error}",
        exc_info=(type(error), error, error.__traceback__),
    )
