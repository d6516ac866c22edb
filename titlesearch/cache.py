"""Cache management module."""
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from titlesearch.config import settings
from titlesearch.logger import logger


class CacheManager:
    """A class to manage the Redis cache."""
    def __init__(self, redis_url: str = settings.REDIS_URL, enabled: bool = settings.CACHE_ENABLED):
        """Initialize the CacheManager."""
        self.redis_url = redis_url
        self.enabled = enabled
        self.redis = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        """Get a value from the cache, None on miss or when Redis is unreachable."""
        if not self.enabled:
            return None
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.warning("Cache read failed for key {key}: {error}", key=key, error=e)
            return None

    async def set(self, key: str, value: str, expire: int = settings.CACHE_TTL):
        """Set a value in the cache."""
        if not self.enabled:
            return
        try:
            await self.redis.set(key, value, ex=expire)
        except RedisError as e:
            logger.warning("Cache write failed for key {key}: {error}", key=key, error=e)

    async def ping(self) -> bool:
        """Check the Redis connection (raises on failure)."""
        return await self.redis.ping()

    async def close(self):
        """Close the Redis connection."""
        await self.redis.aclose()


cache_manager = CacheManager()
