"""Business logic service for the shortlink service."""

import logging
import math
from typing import Optional, Dict, Any, List, Callable
from datetime import datetime, timedelta

from .assignment import CodeAssigner
from .cache_aside import CacheAsideLayer, DEFAULT_CACHE_TTL_SECONDS
from .redirect import RedirectResolver
from .shortcode import ShortCodeGenerator
from .auth import Identity
from .database.base import ShortLinkStoreBase
from .database.cache import RedisCache
from .database.models import ShortLink, utcnow
from .common.validators import is_valid_url
from .errors import Forbidden, InvalidInput, LinkExpired, LinkNotFound

MAX_CODE_LENGTH = 20


class ShortLinkService:
    """Service layer for short link business logic.

    Wires the code assigner, cache-aside layer and redirect resolver to
    one record store and one optional cache, all injected.
    """

    def __init__(
        self,
        store: ShortLinkStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        max_collision_retries: int = 5,
        fallback_code_length: int = 8,
        max_insert_attempts: int = 3,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize short link service.

        Args:
            store: Record store instance
            cache: Optional cache instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            cache_ttl_seconds: TTL for cached redirect entries
            max_collision_retries: Random attempts per code length
            fallback_code_length: Longer code length used after repeated collisions
            max_insert_attempts: Inserts to try when the store reports a conflict
            clock: Returns the current aware UTC time
        """
        self.store = store
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self.generator = short_code_generator or ShortCodeGenerator()
        self.assigner = CodeAssigner(
            store,
            generator=self.generator,
            logger=self.logger,
            max_collision_retries=max_collision_retries,
            fallback_code_length=fallback_code_length,
            max_insert_attempts=max_insert_attempts,
        )
        self.cache_aside = CacheAsideLayer(
            store,
            cache=cache,
            logger=self.logger,
            ttl_seconds=cache_ttl_seconds,
            clock=clock,
        )
        self.resolver = RedirectResolver(self.cache_aside, logger=self.logger)

    async def create_short_url(
        self,
        original_url: str,
        expires_in_days: Optional[float] = None,
        custom_code: Optional[str] = None,
        owner: Optional[Identity] = None,
    ) -> ShortLink:
        """Create a new short link.

        The cache is not populated here, so the first redirect always takes
        the miss path and its click is counted synchronously.

        Args:
            original_url: The original long URL
            expires_in_days: Optional lifetime in days from now
            custom_code: Optional custom short code
            owner: Optional identity that will own the record

        Returns:
            The created record

        Raises:
            InvalidInput: URL or expiry is malformed (custom code: InvalidCode)
            CodeTaken: custom code already exists
            SpaceExhausted: no free code within the retry budget
            UpstreamUnavailable: record store failure
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise InvalidInput(error)

        expires_at = None
        if expires_in_days is not None:
            if not math.isfinite(expires_in_days) or expires_in_days < 0:
                raise InvalidInput("expiresInDays must be a non-negative number.")
            try:
                expires_at = self.clock() + timedelta(days=expires_in_days)
            except (OverflowError, ValueError):
                # Beyond what a datetime can represent
                raise InvalidInput("expiresInDays must be a non-negative number.") from None

        record = await self.assigner.create(
            original_url,
            expires_at=expires_at,
            owner_id=owner.user_id if owner else None,
            custom_code=custom_code,
        )
        self.logger.info(f"Created short URL: {record.short_code} -> {original_url}")
        return record

    async def redirect(self, short_code: str) -> str:
        """Resolve a short code to its redirect target, counting the click.

        Raises:
            LinkNotFound, LinkExpired, UpstreamUnavailable
        """
        # Codes outside the alphabet can never have been issued
        if len(short_code) > MAX_CODE_LENGTH or not self.generator.is_valid_format(short_code):
            raise LinkNotFound()
        return await self.resolver.redirect(short_code)

    async def get_analytics(self, short_code: str) -> ShortLink:
        """Read the record straight from the store (no click is counted).

        Raises:
            LinkNotFound: unknown code
        """
        record = await self.store.find_by_code(short_code)
        if record is None:
            raise LinkNotFound()
        return record

    async def get_live_link(self, short_code: str) -> ShortLink:
        """Fetch a record that must exist and not be expired (no click is counted).

        Raises:
            LinkNotFound, LinkExpired
        """
        record = await self.get_analytics(short_code)
        if record.is_expired(self.clock()):
            raise LinkExpired()
        return record

    async def delete_short_url(self, short_code: str, requester: Identity) -> None:
        """Delete a short link owned by ``requester`` and drop its cache entry.

        Raises:
            LinkNotFound: unknown code
            Forbidden: requester does not own the record
            UpstreamUnavailable: store or cache failure
        """
        record = await self.store.find_by_code(short_code)
        if record is None:
            raise LinkNotFound()

        if record.owner_id is None or record.owner_id != requester.user_id:
            self.logger.warning(
                f"User {requester.user_id} denied deleting {short_code} owned by {record.owner_id}"
            )
            raise Forbidden()

        if not await self.store.delete_by_code(short_code):
            # Deleted concurrently between lookup and delete
            raise LinkNotFound()

        await self.cache_aside.invalidate(short_code)
        self.logger.info(f"Deleted short URL: {short_code}")

    async def list_short_urls(self, owner: Identity) -> List[ShortLink]:
        """List the caller's short links, newest first."""
        return await self.store.list_by_owner(owner.user_id)

    async def get_cache_statistics(self) -> Dict[str, Any]:
        """Cached link count and the cache server's stats section."""
        if self.cache is None or not self.cache.enabled:
            return {"cached_urls": 0, "cache_enabled": False, "redis_info": {}}

        return {
            "cached_urls": await self.cache.count_keys(f"{self.cache.KEY_PREFIX}*"),
            "cache_enabled": True,
            "redis_info": await self.cache.info("stats"),
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Flush pending click increments and close connections."""
        await self.cache_aside.drain()
        await self.store.close()
        if self.cache:
            await self.cache.close()
