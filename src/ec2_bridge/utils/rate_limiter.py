"""Client-side rate limiting for EC2 API actions."""

import time
from threading import Lock

from ..constants import DEFAULT_RATE_LIMITS, FALLBACK_RATE_LIMIT


class TokenBucket:
    """Token bucket implementation for rate limiting."""

    def __init__(self, capacity: int, refill_rate: float) -> None:
        """Initialize token bucket.

        Args:
            capacity: Maximum number of tokens in the bucket
            refill_rate: Number of tokens added per second
        """
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()
        self.lock = Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> bool:
        """Try to consume tokens from the bucket.

        Returns:
            True if tokens were consumed, False if not enough tokens available
        """
        with self.lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False

    def time_until_available(self, tokens: int = 1) -> float:
        """Seconds until ``tokens`` can be consumed."""
        with self.lock:
            self._refill()
            if self.tokens >= tokens:
                return 0.0
            return (tokens - self.tokens) / self.refill_rate


class RateLimiter:
    """Rate limiter holding one token bucket per EC2 API action."""

    def __init__(self, limits: dict[str, tuple[float, int]] | None = None) -> None:
        self.limits = dict(DEFAULT_RATE_LIMITS if limits is None else limits)
        self.buckets: dict[str, TokenBucket] = {}
        self.lock = Lock()

    def _get_bucket(self, action: str) -> TokenBucket:
        with self.lock:
            if action not in self.buckets:
                rate_per_second, burst_capacity = self.limits.get(action, FALLBACK_RATE_LIMIT)
                self.buckets[action] = TokenBucket(capacity=burst_capacity, refill_rate=rate_per_second)
            return self.buckets[action]

    def wait_if_needed(self, action: str, tokens: int = 1) -> float:
        """Block until the action may be called.

        Args:
            action: EC2 API action name, e.g. DescribeInstances
            tokens: Number of tokens to consume (default 1)

        Returns:
            Seconds spent waiting
        """
        bucket = self._get_bucket(action)
        waited = 0.0
        while not bucket.consume(tokens):
            wait_time = bucket.time_until_available(tokens)
            time.sleep(wait_time)
            waited += wait_time
        return waited

    def get_wait_time(self, action: str, tokens: int = 1) -> float:
        """Seconds to wait before ``action`` may be called, without consuming."""
        return self._get_bucket(action).time_until_available(tokens)
