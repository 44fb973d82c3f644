"""Error handling module for the PTM BMUP Setting API."""

from .exceptions import (
    ApiError,
    BadRequestError,
    NotFoundError,
    ConflictError,
    TooManyRequestsError,
    InternalServerError,
    ServiceUnavailableError,
    create_error_response
)
from .handlers import register_exception_handlers, format_validation_errors

__all__ = [
    "ApiError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "TooManyRequestsError",
    "InternalServerError",
    "ServiceUnavailableError",
    "create_error_response",
    "register_exception_handlers",
    "format_validation_errors"
]
