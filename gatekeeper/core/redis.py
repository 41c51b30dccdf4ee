# gatekeeper/core/redis.py
"""
Async Redis client construction for the shared governance store.

The embedding application owns the client lifecycle; this module only
builds one from settings so callers do not repeat the connection options.
"""

import logging
from typing import Optional

from redis.asyncio import Redis as AsyncRedis

from gatekeeper.core.config import settings

logger = logging.getLogger(__name__)


def create_async_redis_client(redis_url: Optional[str] = None) -> AsyncRedis:
    """
    Create an async Redis client suitable for ``RedisBackend``.

    Args:
        redis_url: Connection URL (defaults to ``settings.redis_url``)

    Returns:
        AsyncRedis: client decoding responses to ``str``
    """
    url = redis_url or settings.redis_url
    client = AsyncRedis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
    )
    logger.info("[GATEKEEPER-REDIS] Async Redis client initialized")
    return client

