"""Request governance primitives: rate limiting, circuit breaking and feature flags."""

from gatekeeper.core.exceptions import CircuitBreakerError, ConfigurationError, GatekeeperException
from gatekeeper.flags import FlagConfig, FlagContext, FlagService
from gatekeeper.ratelimit import RateLimitConfig, RateLimiter, RateLimitInfo
from gatekeeper.resilience import CircuitBreaker, CircuitBreakerOptions, CircuitState
from gatekeeper.storage import InMemoryBackend, RedisBackend, StorageBackend

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitBreakerOptions",
    "CircuitState",
    "ConfigurationError",
    "FlagConfig",
    "FlagContext",
    "FlagService",
    "GatekeeperException",
    "InMemoryBackend",
    "RateLimitConfig",
    "RateLimitInfo",
    "RateLimiter",
    "RedisBackend",
    "StorageBackend",
]
