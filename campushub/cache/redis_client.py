"""
Async Redis client backing the token revocation list.

Only short-lived flags live here; RSVP state is never cached. Every call
degrades to "not stored" / "not present" when Redis is unreachable, so the
API keeps serving while the revocation list is down.
"""
from typing import Optional
import redis.asyncio as redis
from campushub.core.config import settings
from campushub.core.logging import logger


class RedisCache:
    """Lazily connected Redis client with a shared connection pool."""

    def __init__(self, url: Optional[str] = None):
        self._url = url or settings.REDIS_URL
        self._pool: Optional[redis.ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._pool = redis.ConnectionPool.from_url(
                self._url,
                decode_responses=True,
                max_connections=20,
                socket_connect_timeout=1,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Redis connection pool created")
        return self._client

    async def set_flag(self, key: str, ttl_seconds: int) -> bool:
        """
        Store ``key`` until it expires after ``ttl_seconds``.

        Returns:
            True if Redis accepted the write, False otherwise
        """
        try:
            await self._get_client().set(key, "1", ex=ttl_seconds)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        try:
            return await self._get_client().exists(key) > 0
        except redis.RedisError as e:
            logger.error(f"Redis EXISTS error for key {key}: {e}")
            return False

    async def ping(self) -> bool:
        try:
            return bool(await self._get_client().ping())
        except redis.RedisError as e:
            logger.warning(f"Redis PING failed: {e}")
            return False

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
            self._pool = None
            logger.info("Redis connection pool closed")


cache = RedisCache()
