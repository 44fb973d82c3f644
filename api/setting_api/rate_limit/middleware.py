"""Rate limiting middleware for FastAPI."""

import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .storage import RateLimitStorage
from ..errors.exceptions import TooManyRequestsError


logger = logging.getLogger(__name__)

DEFAULT_SKIP_PATHS = ["/health", "/ready", "/live", "/", "/docs", "/redoc", "/openapi.json"]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limits each client IP to ``max_requests`` per minute.

    Exceeding the limit returns 429 with a ``Retry-After`` header.
    """

    def __init__(
        self,
        app,
        max_requests: int = 60,
        skip_paths: Optional[list[str]] = None,
        storage: Optional[RateLimitStorage] = None
    ):
        super().__init__(app)
        self.skip_paths = skip_paths if skip_paths is not None else DEFAULT_SKIP_PATHS
        self.storage = storage or RateLimitStorage(max_requests=max_requests)

        logger.info(f"Rate limiting initialized: {self.storage.max_requests} requests per minute per IP")

    async def dispatch(self, request: Request, call_next):
        """Process the request through rate limiting middleware."""
        if request.url.path in self.skip_paths:
            return await call_next(request)

        client_ip = self._get_client_ip(request) or "unknown"
        result = self.storage.get_bucket(f"ip:{client_ip}").consume()

        if not result.allowed:
            retry_after = max(1, int(result.retry_after))
            logger.warning(
                f"Rate limit exceeded for IP: {client_ip}",
                extra={
                    "client_ip": client_ip,
                    "path": request.url.path,
                    "method": request.method,
                    "retry_after": retry_after
                }
            )
            return TooManyRequestsError(retry_after=retry_after).to_response(request)

        return await call_next(request)

    def _get_client_ip(self, request: Request) -> Optional[str]:
        """
        Extract client IP address from request.

        Handles common proxy headers for proper IP detection.
        """
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # Take the first IP in the chain
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return None
