"""Exception handlers for the PTM BMUP Setting API."""

import logging
from typing import Union, List, Dict, Any, Sequence
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from .exceptions import ApiError, InternalServerError, create_error_response

logger = logging.getLogger(__name__)


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[str]:
    """Turn pydantic error dicts into ``"field: message"`` strings.

    The request location prefix (``query``, ``body``, ``path``, ``header``)
    is dropped so messages name the field the client sent.
    """
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("query", "body", "path", "header"):
            loc = loc[1:]
        field = ".".join(loc) if loc else "query"
        msg = error.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{field}: {msg}")
    return messages or ["Invalid request parameters"]


async def api_error_handler(
    request: Request,
    exc: ApiError
) -> JSONResponse:
    """Handle ApiError instances."""
    if isinstance(exc, InternalServerError):
        logger.error(
            f"Internal error: {exc.detail}",
            extra={
                "status_code": exc.status,
                "path": str(request.url.path),
                "method": request.method,
            }
        )
    else:
        logger.info(
            f"API error: {exc.status} - {exc.message}",
            extra={
                "status_code": exc.status,
                "path": str(request.url.path),
                "method": request.method,
            }
        )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI HTTPException and Starlette HTTPException."""
    logger.info(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    if exc.status_code == 404:
        message = f"Route {request.method} {request.url.path} not found"
    elif exc.status_code >= 500:
        message = "Internal server error"
    else:
        message = str(exc.detail) if exc.detail else "Request failed"

    headers = dict(exc.headers) if getattr(exc, "headers", None) else None
    return create_error_response(exc.status_code, message, headers=headers)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (query, path, header and body)."""
    messages = format_validation_errors(exc.errors())
    logger.info(
        f"Validation error: {len(messages)} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": messages,
        }
    )
    return create_error_response(400, messages)


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle pydantic validation errors raised inside endpoints."""
    messages = format_validation_errors(exc.errors())
    logger.info(
        f"Pydantic validation error: {len(messages)} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": messages,
        }
    )
    return create_error_response(400, messages)


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details
    return create_error_response(500, "Internal server error")


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""

    app.add_exception_handler(ApiError, api_error_handler)

    # FastAPI and Starlette HTTP exceptions
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Validation exceptions
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
