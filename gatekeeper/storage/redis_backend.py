# gatekeeper/storage/redis_backend.py
"""
Redis-backed storage for state shared across service instances.

Sliding windows are sorted sets scored by attempt time in milliseconds.
The prune/add/count/expire sequence for one attempt runs inside a single
MULTI/EXEC transaction so concurrent callers cannot interleave between the
count and the insert.
"""

import asyncio
import secrets
from typing import Any, Awaitable, List, Optional, TypeVar

from redis.asyncio import Redis as AsyncRedis

from gatekeeper.core.config import settings
from gatekeeper.core.redis import create_async_redis_client

T = TypeVar("T")


class RedisBackend:
    """
    ``StorageBackend`` over an async Redis client.

    Args:
        redis: client created by the embedding application (``decode_responses=True``)
        timeout: optional seconds allowed per round trip; ``None`` waits indefinitely
    """

    def __init__(self, redis: AsyncRedis, timeout: Optional[float] = None) -> None:
        self._redis = redis
        self._timeout = timeout

    async def _run(self, awaitable: Awaitable[T]) -> T:
        if self._timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, self._timeout)

    async def window_hit(self, key: str, now_ms: int, window_start_ms: int, ttl_seconds: int) -> int:
        # Members must be unique per attempt; two hits in the same millisecond still count twice
        member = f"{now_ms}:{secrets.token_hex(6)}"

        async def _transaction() -> List[Any]:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(key, "-inf", window_start_ms)
                pipe.zadd(key, {member: now_ms})
                pipe.zcard(key)
                pipe.expire(key, ttl_seconds)
                return await pipe.execute()

        results = await self._run(_transaction())
        # results[2] is the count after adding the current attempt
        return int(results[2] or 0)

    async def window_count(self, key: str, window_start_ms: int) -> int:
        async def _transaction() -> List[Any]:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(key, "-inf", window_start_ms)
                pipe.zcard(key)
                return await pipe.execute()

        results = await self._run(_transaction())
        return int(results[1] or 0)

    async def delete(self, key: str) -> None:
        await self._run(self._redis.delete(key))

    async def get(self, key: str) -> Optional[str]:
        value = await self._run(self._redis.get(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self._run(self._redis.set(key, value))

    async def keys(self, pattern: str) -> List[str]:
        async def _scan() -> List[str]:
            found = []
            async for name in self._redis.scan_iter(match=pattern):
                found.append(name.decode("utf-8") if isinstance(name, bytes) else name)
            return sorted(found)

        return await self._run(_scan())


def create_redis_backend(redis: Optional[AsyncRedis] = None) -> RedisBackend:
    """Build a ``RedisBackend`` from settings, creating a client when none is given."""
    client = redis if redis is not None else create_async_redis_client()
    return RedisBackend(client, timeout=settings.backend_timeout_seconds)
