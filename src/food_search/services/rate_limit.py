"""Throttling helpers for outbound FDC calls and the proxy relay."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

DEFAULT_MIN_INTERVAL_SECONDS = 0.5


@dataclass
class RateLimiter:
    """Keeps a minimum interval between consecutive outbound requests.

    Callers wait out the remainder of the interval, then stamp the current
    time. There is no queue or lock: two coroutines that read the stamp
    before either updates it can both proceed.
    """

    min_interval_seconds: float = DEFAULT_MIN_INTERVAL_SECONDS
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    last_request_at: float | None = None

    async def wait(self) -> None:
        """Delay until the interval since the last request has passed."""
        if self.last_request_at is not None:
            elapsed = self.clock() - self.last_request_at
            if elapsed < self.min_interval_seconds:
                await self.sleep(self.min_interval_seconds - elapsed)
        self.last_request_at = self.clock()


@dataclass
class _Bucket:
    tokens: float
    refilled_at: float


@dataclass
class TokenBucketLimiter:
    """Per-key token bucket used by the proxy relay."""

    capacity: float = 60
    refill_per_second: float = 0.5
    clock: Callable[[], float] = time.monotonic
    _buckets: dict[str, _Bucket] = field(default_factory=dict)

    def take(self, key: str) -> bool:
        """Consume a token for ``key`` and report whether one was available."""
        now = self.clock()
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(tokens=self.capacity, refilled_at=now)
            self._buckets[key] = bucket
        elapsed = now - bucket.refilled_at
        bucket.tokens = min(
            self.capacity, bucket.tokens + elapsed * self.refill_per_second
        )
        bucket.refilled_at = now
        if bucket.tokens >= 1:
            bucket.tokens -= 1
            return True
        return False
