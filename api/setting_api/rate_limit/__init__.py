"""Rate limiting module for the PTM BMUP Setting API."""

from .token_bucket import TokenBucket, RateLimitResult
from .storage import RateLimitStorage
from .middleware import RateLimitMiddleware

__all__ = [
    "TokenBucket",
    "RateLimitResult",
    "RateLimitStorage",
    "RateLimitMiddleware",
]
