"""Token bucket used for per-client rate limiting."""

import time
from typing import NamedTuple
from dataclasses import dataclass


class RateLimitResult(NamedTuple):
    """Result of a rate limit check."""
    allowed: bool
    retry_after: float  # seconds until next allowed request


@dataclass
class TokenBucket:
    """
    Token bucket refilled continuously at ``refill_rate`` tokens per second
    up to ``capacity``. Each request consumes one token.
    """
    capacity: int
    refill_rate: float
    tokens: float
    last_refill: float

    @classmethod
    def per_window(cls, max_requests: int, window_seconds: float) -> "TokenBucket":
        """Create a full bucket allowing ``max_requests`` per window."""
        return cls(
            capacity=max_requests,
            refill_rate=max_requests / window_seconds,
            tokens=float(max_requests),
            last_refill=time.monotonic()
        )

    def _refill_tokens(self, now: float) -> None:
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> RateLimitResult:
        """
        Attempt to consume tokens from the bucket.

        Args:
            tokens: Number of tokens to consume (default: 1)

        Returns:
            RateLimitResult indicating if request is allowed and retry time
        """
        self._refill_tokens(time.monotonic())

        if self.tokens >= tokens:
            self.tokens -= tokens
            return RateLimitResult(allowed=True, retry_after=0.0)

        tokens_needed = tokens - self.tokens
        return RateLimitResult(allowed=False, retry_after=tokens_needed / self.refill_rate)

    @property
    def is_full(self) -> bool:
        self._refill_tokens(time.monotonic())
        return self.tokens >= self.capacity
