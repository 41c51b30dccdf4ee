"""Sliding window rate limiting with in-process or Redis-backed windows."""

from .config import API_RATE_LIMIT, AUTH_RATE_LIMIT, RateLimitConfig
from .dependency import default_key, rate_limit
from .headers import set_rate_headers, to_rate_limit_headers
from .limiter import (
    RateLimiter,
    RateLimitInfo,
    create_in_memory_rate_limiter,
    create_redis_rate_limiter,
)

__all__ = [
    "API_RATE_LIMIT",
    "AUTH_RATE_LIMIT",
    "RateLimitConfig",
    "RateLimitInfo",
    "RateLimiter",
    "create_in_memory_rate_limiter",
    "create_redis_rate_limiter",
    "default_key",
    "rate_limit",
    "set_rate_headers",
    "to_rate_limit_headers",
]
