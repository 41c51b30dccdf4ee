"""Storage backends shared by the rate limiter and the flag override layer."""

from .base import StorageBackend
from .memory import InMemoryBackend
from .redis_backend import RedisBackend, create_redis_backend

__all__ = [
    "InMemoryBackend",
    "RedisBackend",
    "StorageBackend",
    "create_redis_backend",
]
