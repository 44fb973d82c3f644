"""API error types rendered as ``{success: false, ...}`` envelopes."""

from typing import Optional, Dict, Any, List, Union

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Base exception for error responses.

    Carries an HTTP status and one or more human-readable messages. A single
    message is exposed as ``message``; every message is also listed under
    ``errors`` so clients can render validation-style output uniformly.
    """

    def __init__(
        self,
        status: int,
        messages: Union[str, List[str]],
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status = status
        self.messages = list(messages) if isinstance(messages, (list, tuple)) else [messages]
        self.headers = headers or {}
        super().__init__(", ".join(self.messages))

    @property
    def message(self) -> str:
        return ", ".join(self.messages)

    def to_body(self) -> Dict[str, Any]:
        """Build the JSON body for this error."""
        return {
            "success": False,
            "message": self.message,
            "errors": self.messages,
        }

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to a JSONResponse."""
        return JSONResponse(
            status_code=self.status,
            content=self.to_body(),
            headers=self.headers or None,
        )


class BadRequestError(ApiError):
    """400 Bad Request error."""

    def __init__(self, messages: Union[str, List[str]]):
        super().__init__(status=400, messages=messages)


class NotFoundError(ApiError):
    """404 Not Found error."""

    def __init__(self, messages: Union[str, List[str]] = "Resource not found"):
        super().__init__(status=404, messages=messages)


class ConflictError(ApiError):
    """409 Conflict error."""

    def __init__(self, messages: Union[str, List[str]]):
        super().__init__(status=409, messages=messages)


class TooManyRequestsError(ApiError):
    """429 Too Many Requests error."""

    def __init__(
        self,
        messages: Union[str, List[str]] = "Too many requests from this IP, please try again later.",
        retry_after: Optional[int] = None,
    ):
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        self.retry_after = retry_after
        super().__init__(status=429, messages=messages, headers=headers)


class InternalServerError(ApiError):
    """500 Internal Server Error.

    The detailed message is kept for logs; clients only see the generic text.
    """

    def __init__(self, detail: str = "Internal server error"):
        self.detail = detail
        super().__init__(status=500, messages="Internal server error")


class ServiceUnavailableError(ApiError):
    """503 Service Unavailable error."""

    def __init__(self, messages: Union[str, List[str]] = "Service temporarily unavailable"):
        super().__init__(status=503, messages=messages)


def create_error_response(
    status: int,
    messages: Union[str, List[str]],
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Create an error envelope response without raising."""
    return ApiError(status=status, messages=messages, headers=headers).to_response()
