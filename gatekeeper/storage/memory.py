# gatekeeper/storage/memory.py
"""
In-process storage backend.

Suitable for development, tests and single-instance deployments. State is
private to the instance that created it, so several service instances each
using their own ``InMemoryBackend`` will each enforce limits independently.
Do not use it behind a load balancer.

Windows carry an expiry like the Redis keys they stand in for. Expired
windows are swept on the next ``window_hit``, so identifiers that never
return do not accumulate.

None of the coroutines below await between reading and writing a window,
so on a single event loop every operation is atomic. Hosts that call into
one backend from several threads (each with its own loop) must serialize
access themselves.
"""

from fnmatch import fnmatchcase
from typing import Dict, List, Optional


class InMemoryBackend:
    """Dict-backed implementation of ``StorageBackend``."""

    def __init__(self) -> None:
        self._windows: Dict[str, List[int]] = {}
        # key -> expiry (epoch ms), ordered by last refresh
        self._expires_at: Dict[str, int] = {}
        self._values: Dict[str, str] = {}

    def _drop_window(self, key: str) -> None:
        self._windows.pop(key, None)
        self._expires_at.pop(key, None)

    def _sweep(self, now_ms: int) -> None:
        for key, expires_at in list(self._expires_at.items()):
            if expires_at > now_ms:
                # Later entries were refreshed more recently
                break
            self._drop_window(key)

    def _prune(self, key: str, window_start_ms: int) -> List[int]:
        entries = [ts for ts in self._windows.get(key, []) if ts > window_start_ms]
        if entries:
            self._windows[key] = entries
        else:
            self._drop_window(key)
        return entries

    async def window_hit(self, key: str, now_ms: int, window_start_ms: int, ttl_seconds: int) -> int:
        self._sweep(now_ms)
        entries = self._prune(key, window_start_ms)
        entries.append(now_ms)
        self._windows[key] = entries
        self._expires_at.pop(key, None)
        self._expires_at[key] = now_ms + ttl_seconds * 1000
        return len(entries)

    async def window_count(self, key: str, window_start_ms: int) -> int:
        return len(self._prune(key, window_start_ms))

    async def delete(self, key: str) -> None:
        self._drop_window(key)
        self._values.pop(key, None)

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def keys(self, pattern: str) -> List[str]:
        names = set(self._values) | set(self._windows)
        return sorted(name for name in names if fnmatchcase(name, pattern))
