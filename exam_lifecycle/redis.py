"""Redis connection for status change events.

Redis only carries notifications; the database is the source of truth. The
service therefore runs without it: when REDIS_ENABLED is off or the
connection was never opened, callers get None and skip publishing instead
of failing the request.
"""

import redis.asyncio as aioredis

from exam_lifecycle.config import get_settings
from exam_lifecycle.logging_config import get_logger

logger = get_logger(__name__)

_redis: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis | None:
    """Connection for publishing status events, or None when events are off."""
    if not get_settings().redis_enabled:
        return None
    return _redis


async def init_redis(url: str) -> aioredis.Redis:
    """Open the shared connection and check it with PING."""
    global _redis
    _redis = aioredis.from_url(url, decode_responses=True)
    await _redis.ping()
    logger.info("redis_connected", url=url)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
        logger.info("redis_connection_closed")
