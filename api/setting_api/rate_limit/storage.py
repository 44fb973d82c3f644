"""In-memory storage for rate limiting state."""

import threading
import time
from typing import Dict
from .token_bucket import TokenBucket


class RateLimitStorage:
    """
    Thread-safe in-memory map of client key to token bucket.

    Buckets that are full again (the client went quiet) are dropped during
    periodic cleanup so the map does not grow without bound.
    """

    def __init__(self, max_requests: int, window_seconds: float = 60.0, cleanup_interval: float = 300.0):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._buckets: Dict[str, TokenBucket] = {}
        self._lock = threading.RLock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.monotonic()

    def _cleanup_idle_buckets(self) -> None:
        now = time.monotonic()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        idle_keys = [key for key, bucket in self._buckets.items() if bucket.is_full]
        for key in idle_keys:
            del self._buckets[key]

        self._last_cleanup = now

    def get_bucket(self, key: str) -> TokenBucket:
        """Get or create the bucket for ``key``."""
        with self._lock:
            self._cleanup_idle_buckets()

            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket.per_window(self.max_requests, self.window_seconds)
                self._buckets[key] = bucket
            return bucket

    def clear_all(self) -> None:
        """Clear all buckets from storage."""
        with self._lock:
            self._buckets.clear()

    def get_bucket_count(self) -> int:
        """Get the current number of buckets in storage."""
        with self._lock:
            return len(self._buckets)
