# tests/conftest.py
"""
Shared fixtures for the gatekeeper test suite.

No test talks to a real Redis: ``FakeRedis`` implements the subset of the
async client the backends use, applying each transactional pipeline as one
unit under a lock.
"""

import asyncio
from fnmatch import fnmatchcase
import os
from typing import Any, Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("GATEKEEPER_RATE_LIMIT_ENABLED", "true")

from gatekeeper.storage import InMemoryBackend, RedisBackend  # noqa: E402


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _score(bound: Any) -> float:
    return float(bound)


class FakePipeline:
    def __init__(self, redis: "FakeRedis", transaction: bool) -> None:
        self._redis = redis
        self.transaction = transaction
        self.commands: List[Tuple[str, tuple]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.commands = []

    def _queue(self, name: str, *args: Any) -> "FakePipeline":
        self.commands.append((name, args))
        return self

    def zremrangebyscore(self, name: str, min: Any, max: Any) -> "FakePipeline":
        return self._queue("zremrangebyscore", name, min, max)

    def zadd(self, name: str, mapping: Dict[str, float]) -> "FakePipeline":
        return self._queue("zadd", name, mapping)

    def zcard(self, name: str) -> "FakePipeline":
        return self._queue("zcard", name)

    def expire(self, name: str, seconds: int) -> "FakePipeline":
        return self._queue("expire", name, seconds)

    async def execute(self) -> List[Any]:
        self._redis.pipelines.append(list(self.commands))
        if self._redis.fail_with is not None:
            raise self._redis.fail_with
        async with self._redis.lock:
            # Yield inside the transaction so other callers really are waiting
            await asyncio.sleep(0)
            return [self._redis.apply(name, args) for name, args in self.commands]


class FakeRedis:
    def __init__(self) -> None:
        self.zsets: Dict[str, Dict[str, float]] = {}
        self.values: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.pipelines: List[List[Tuple[str, tuple]]] = []
        self.lock = asyncio.Lock()
        self.fail_with: Optional[BaseException] = None

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    def apply(self, name: str, args: tuple) -> Any:
        if name == "zremrangebyscore":
            key, low, high = args
            members = self.zsets.get(key, {})
            doomed = [m for m, s in members.items() if _score(low) <= s <= _score(high)]
            for member in doomed:
                del members[member]
            return len(doomed)
        if name == "zadd":
            key, mapping = args
            members = self.zsets.setdefault(key, {})
            added = sum(1 for m in mapping if m not in members)
            members.update({m: float(s) for m, s in mapping.items()})
            return added
        if name == "zcard":
            return len(self.zsets.get(args[0], {}))
        if name == "expire":
            key, seconds = args
            self.ttls[key] = seconds
            return 1
        raise AssertionError(f"unexpected command {name}")

    async def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            removed += int(self.zsets.pop(name, None) is not None)
            removed += int(self.values.pop(name, None) is not None)
            self.ttls.pop(name, None)
        return removed

    async def get(self, name: str) -> Optional[str]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.values.get(name)

    async def set(self, name: str, value: str) -> bool:
        self.values[name] = value
        return True

    async def scan_iter(self, match: Optional[str] = None):
        for name in sorted(set(self.values) | set(self.zsets)):
            if match is None or fnmatchcase(name, match):
                yield name


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def redis_backend(fake_redis: FakeRedis) -> RedisBackend:
    return RedisBackend(fake_redis)


@pytest.fixture(params=["memory", "redis"])
def backend(request, memory_backend, redis_backend):
    """Run a test against both storage implementations."""
    return memory_backend if request.param == "memory" else redis_backend
