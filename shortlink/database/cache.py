"""Redis cache layer for short links."""

import logging
from typing import Optional, Dict, Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import UpstreamUnavailable

CACHE_ERRORS = (RedisError, OSError)


class RedisCache:
    """Redis cache for short link lookups.

    Transport failures are logged and raised as ``UpstreamUnavailable``;
    callers on the read path treat that as a miss.
    """

    KEY_PREFIX = "url:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            logger: Optional logger instance
            client: Optional pre-built async client (skips connect)
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = client
        self.enabled = client is not None or redis_url is not None

        if self.enabled:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis; caching is disabled if the server is unreachable."""
        if not self.enabled or self.client is not None:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except CACHE_ERRORS as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    def _raise_unavailable(self, operation: str, error: Exception) -> None:
        self.logger.error(f"Cache {operation} error: {error}")
        raise UpstreamUnavailable() from error

    async def get(self, key: str) -> Optional[str]:
        """Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(key)
        except CACHE_ERRORS as e:
            self._raise_unavailable("get", e)

    async def set_with_ttl(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
    ) -> bool:
        """Set value in cache with an expiry.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Optional TTL override (seconds)

        Returns:
            True if stored, False if caching is disabled
        """
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(key, ttl or self.ttl_seconds, value)
            return True
        except CACHE_ERRORS as e:
            self._raise_unavailable("set", e)

    async def delete(self, key: str) -> bool:
        """Delete key from cache.

        Args:
            key: Cache key

        Returns:
            True if a key was removed
        """
        if not self.enabled or not self.client:
            return False

        try:
            result = await self.client.delete(key)
            return result > 0
        except CACHE_ERRORS as e:
            self._raise_unavailable("delete", e)

    async def count_keys(self, pattern: str = "url:*") -> int:
        """Count keys matching a pattern using SCAN (non-blocking for the server)."""
        if not self.enabled or not self.client:
            return 0

        try:
            count = 0
            async for _ in self.client.scan_iter(match=pattern, count=500):
                count += 1
            return count
        except CACHE_ERRORS as e:
            self._raise_unavailable("scan", e)

    async def info(self, section: str = "stats") -> Dict[str, Any]:
        """Return the server INFO section, or an empty dict when disabled."""
        if not self.enabled or not self.client:
            return {}

        try:
            return await self.client.info(section)
        except CACHE_ERRORS as e:
            self._raise_unavailable("info", e)

    async def ping(self) -> bool:
        """Check connectivity; False when disabled or unreachable."""
        if not self.enabled or not self.client:
            return False

        try:
            return bool(await self.client.ping())
        except CACHE_ERRORS as e:
            self.logger.warning(f"Cache ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, short_code: str) -> str:
        """Generate cache key for short code.

        Args:
            short_code: The short code

        Returns:
            Cache key
        """
        return f"{self.KEY_PREFIX}{short_code}"
