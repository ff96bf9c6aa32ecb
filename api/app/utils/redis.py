"""
Redis Connection - Search result cache
"""
import redis.asyncio as redis
from typing import Optional, Any
import logging

from app.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Optional[redis.Redis] = None


async def init_redis():
    """Initialize Redis connection"""
    global redis_client
    logger.info("Initializing Redis connection...")
    redis_client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Caching will be disabled.")


async def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        logger.info("Closing Redis connection...")
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")


class NoOpCache:
    """Stands in for Redis when it is unavailable; every lookup misses"""

    async def ping(self) -> bool:
        return False

    async def get(self, key: str) -> None:
        return None

    async def setex(self, key: str, ttl: int, value: Any) -> bool:
        return True

    async def delete(self, key: str) -> int:
        return 0


_noop_cache = NoOpCache()


async def get_redis():
    """
    Dependency that provides the Redis client
    Usage: cache = Depends(get_redis)

    Falls back to a no-op cache when Redis is down, searches then run uncached
    """
    if redis_client is None:
        logger.debug("Redis client not initialized, using no-op cache")
        return _noop_cache

    try:
        await redis_client.ping()
        return redis_client
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}, using no-op cache")
        return _noop_cache
