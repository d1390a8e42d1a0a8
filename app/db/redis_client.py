from redis.asyncio import Redis
import json
from typing import Any, Optional
from app.core.config import Settings
import logging

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> Optional[Redis]:
    """Create the Redis client, or None when caching is not configured"""
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set - report cache disabled")
        return None

    return Redis.from_url(
        settings.REDIS_URL,
        db=settings.REDIS_DB,
        decode_responses=True
    )


class CacheService:
    """Redis cache for report lookups. Errors are logged and treated as misses."""

    def __init__(self, client: Optional[Redis] = None, ttl: int = 300):
        self.client = client
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if not self.client:
            return None
        try:
            value = await self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with TTL"""
        if not self.client:
            return False
        try:
            await self.client.setex(key, ttl or self.ttl, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache"""
        if not self.client:
            return False
        try:
            await self.client.delete(key)
            return True
        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            return False

    async def close(self):
        """Close Redis client connection"""
        if self.client:
            await self.client.aclose()
            self.client = None
