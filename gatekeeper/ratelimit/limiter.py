# gatekeeper/ratelimit/limiter.py
"""
Sliding window rate limiter.

Every ``check()`` records the attempt before comparing against the limit
(count-then-compare), so rejected attempts also occupy the window. With a
shared backend the record and the count happen in one atomic step, which
keeps a burst of N+1 concurrent checks against a limit of N from all
seeing a stale count.
"""

from dataclasses import dataclass
import math
import time
from typing import Any, Callable, Optional

from redis.asyncio import Redis as AsyncRedis

from gatekeeper.core.validation import validate_config
from gatekeeper.storage import InMemoryBackend, RedisBackend, StorageBackend

from .config import RateLimitConfig


@dataclass(frozen=True)
class RateLimitInfo:
    allowed: bool
    limit: int
    remaining: int
    # Unix timestamp (seconds) when this attempt leaves the window
    reset_at: int
    # Seconds to wait before retrying; only set when rejected
    retry_after: Optional[int] = None


class RateLimiter:
    """
    Per-identifier admission control over a trailing window.

    Args:
        config: ``RateLimitConfig`` or a mapping validated into one
        backend: storage holding the windows
        clock: returns the current epoch time in seconds

    Storage errors propagate to the caller; whether to fail open or closed
    is the caller's decision.
    """

    def __init__(
        self,
        config: Any,
        backend: StorageBackend,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = validate_config(RateLimitConfig, config)
        self.backend = backend
        self._clock = clock

    def _key(self, identifier: str) -> str:
        return f"{self.config.key_prefix}{identifier}"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _reset_at(self, now_ms: int) -> int:
        return math.ceil((now_ms + self.config.window_seconds * 1000) / 1000)

    async def check(self, identifier: str) -> RateLimitInfo:
        """Record one attempt for ``identifier`` and decide whether it is admitted."""
        now_ms = self._now_ms()
        window_start_ms = now_ms - self.config.window_seconds * 1000

        count = await self.backend.window_hit(
            self._key(identifier), now_ms, window_start_ms, self.config.window_seconds
        )
        reset_at = self._reset_at(now_ms)

        if count > self.config.max:
            return RateLimitInfo(
                allowed=False,
                limit=self.config.max,
                remaining=0,
                reset_at=reset_at,
                retry_after=self.config.window_seconds,
            )

        return RateLimitInfo(
            allowed=True,
            limit=self.config.max,
            remaining=max(0, self.config.max - count),
            reset_at=reset_at,
        )

    async def peek(self, identifier: str) -> RateLimitInfo:
        """Report the current window without recording an attempt."""
        now_ms = self._now_ms()
        window_start_ms = now_ms - self.config.window_seconds * 1000

        count = await self.backend.window_count(self._key(identifier), window_start_ms)
        return RateLimitInfo(
            allowed=count < self.config.max,
            limit=self.config.max,
            remaining=max(0, self.config.max - count),
            reset_at=self._reset_at(now_ms),
        )

    async def reset(self, identifier: str) -> None:
        """Drop every recorded attempt for ``identifier``."""
        await self.backend.delete(self._key(identifier))


def create_in_memory_rate_limiter(
    config: Any, clock: Callable[[], float] = time.time
) -> RateLimiter:
    """
    Create a limiter over a private in-process backend.

    Suitable for development and testing. Not for production multi-instance.
    """
    return RateLimiter(config, InMemoryBackend(), clock=clock)


def create_redis_rate_limiter(
    redis: AsyncRedis,
    config: Any,
    timeout: Optional[float] = None,
    clock: Callable[[], float] = time.time,
) -> RateLimiter:
    """Create a limiter whose windows are shared through Redis."""
    return RateLimiter(config, RedisBackend(redis, timeout=timeout), clock=clock)
