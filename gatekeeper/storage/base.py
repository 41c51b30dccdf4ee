# gatekeeper/storage/base.py
"""
Narrow storage capability used by the governance primitives.

Only the operations the rate limiter and the flag override layer need are
part of the contract, so an in-process map can stand in for Redis.
"""

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """Operations required from a window/override store."""

    async def window_hit(self, key: str, now_ms: int, window_start_ms: int, ttl_seconds: int) -> int:
        """
        Atomically prune, record and count one attempt.

        Removes every entry scored at or before ``window_start_ms``, adds an
        entry scored ``now_ms``, refreshes the key TTL and returns the number
        of entries left in the window (including the new one).
        """
        ...

    async def window_count(self, key: str, window_start_ms: int) -> int:
        """Prune entries at or before ``window_start_ms`` and return the count."""
        ...

    async def delete(self, key: str) -> None:
        ...

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def keys(self, pattern: str) -> List[str]:
        """Return keys matching a glob-style ``pattern``."""
        ...
