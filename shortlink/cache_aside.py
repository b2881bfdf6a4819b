"""Cache-aside read path for short links.

Lookups go to the cache first and fall back to the record store. Clicks
are counted at two distinct call sites:

* cache hit: a background task increments the counter. Redirect latency
  wins; a failed increment is logged and dropped.
* cache miss: the increment is awaited before returning, because no
  other path will ever account for that click.

The cache is an optimisation only. Any cache failure on this path is
logged and handled as a miss, and a cached entry can disagree with the
store for at most its TTL.
"""

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Set

from .database.base import ShortLinkStoreBase
from .database.cache import RedisCache
from .database.models import ensure_utc, is_expired, utcnow
from .errors import UpstreamUnavailable

DEFAULT_CACHE_TTL_SECONDS = 3600


class ResolutionStatus(Enum):
    LIVE = "live"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class CachedLink:
    """The part of a record the redirect path needs; also the cache payload."""

    original_url: str
    expires_at: Optional[datetime] = None

    def to_json(self) -> str:
        return json.dumps({
            "originalUrl": self.original_url,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
        })

    @classmethod
    def from_json(cls, payload: str) -> "CachedLink":
        """Decode a cache payload.

        Raises:
            ValueError: payload is not a valid cached link
        """
        try:
            data = json.loads(payload)
            original_url = data["originalUrl"]
            expires_at = data.get("expiresAt")
            if expires_at is not None:
                expires_at = ensure_utc(datetime.fromisoformat(expires_at))
        except (TypeError, KeyError, AttributeError) as e:
            raise ValueError(f"Malformed cache payload: {e!r}") from e

        if not isinstance(original_url, str):
            raise ValueError("Malformed cache payload: originalUrl is not a string")

        return cls(original_url=original_url, expires_at=expires_at)


@dataclass(frozen=True)
class Resolution:
    """Outcome of a cache-aside lookup."""

    status: ResolutionStatus
    entry: Optional[CachedLink] = None
    cache_hit: bool = False

    @property
    def is_live(self) -> bool:
        return self.status is ResolutionStatus.LIVE


class CacheAsideLayer:
    """Two-tier lookup (cache, then store) with click accounting."""

    def __init__(
        self,
        store: ShortLinkStoreBase,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the cache-aside layer.

        Args:
            store: Source of truth for short links
            cache: Optional cache; without one every lookup is a miss
            logger: Optional logger
            ttl_seconds: TTL for populated entries
            clock: Returns the current aware UTC time
        """
        self.store = store
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._background: Set[asyncio.Task] = set()

    async def resolve(self, short_code: str) -> Resolution:
        """Look up a short code and count the click if it is live.

        Raises:
            UpstreamUnavailable: the record store failed on a cache miss
        """
        cached = await self._read_cache(short_code)
        if cached is not None:
            now = self.clock()
            if is_expired(cached.expires_at, now):
                self.logger.debug(f"Cache hit for expired {short_code}")
                await self._invalidate_quietly(short_code)
                return Resolution(ResolutionStatus.EXPIRED, cached, cache_hit=True)

            self.logger.debug(f"Cache hit for {short_code}")
            self._schedule_increment(short_code)
            return Resolution(ResolutionStatus.LIVE, cached, cache_hit=True)

        self.logger.debug(f"Cache miss for {short_code}")
        record = await self.store.find_by_code(short_code)
        if record is None:
            return Resolution(ResolutionStatus.NOT_FOUND)

        entry = CachedLink(record.original_url, record.expires_at)
        if record.is_expired(self.clock()):
            return Resolution(ResolutionStatus.EXPIRED, entry)

        try:
            await self.populate(short_code, entry.original_url, entry.expires_at)
        except UpstreamUnavailable:
            self.logger.warning(f"Could not cache {short_code}; continuing uncached")

        await self.store.increment_clicks(short_code)
        return Resolution(ResolutionStatus.LIVE, entry)

    async def populate(
        self,
        short_code: str,
        original_url: str,
        expires_at: Optional[datetime] = None,
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """Store ``{originalUrl, expiresAt}`` under the code's key.

        The TTL never outlives the link itself.

        Raises:
            UpstreamUnavailable: the cache rejected the write
        """
        if self.cache is None:
            return False

        ttl = ttl_seconds or self.ttl_seconds
        if expires_at is not None:
            remaining = math.ceil((expires_at - self.clock()).total_seconds())
            ttl = max(1, min(ttl, remaining))

        entry = CachedLink(original_url, expires_at)
        return await self.cache.set_with_ttl(self.cache.get_cache_key(short_code), entry.to_json(), ttl)

    async def invalidate(self, short_code: str) -> bool:
        """Drop the cached entry for a code.

        Raises:
            UpstreamUnavailable: the cache could not be reached
        """
        if self.cache is None:
            return False
        return await self.cache.delete(self.cache.get_cache_key(short_code))

    async def drain(self) -> None:
        """Wait for all scheduled background click increments."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    @property
    def pending_increments(self) -> int:
        return len(self._background)

    async def _read_cache(self, short_code: str) -> Optional[CachedLink]:
        if self.cache is None:
            return None

        try:
            payload = await self.cache.get(self.cache.get_cache_key(short_code))
        except UpstreamUnavailable:
            self.logger.warning(f"Cache read failed for {short_code}; falling back to store")
            return None

        if payload is None:
            return None

        try:
            return CachedLink.from_json(payload)
        except ValueError as e:
            self.logger.warning(f"Discarding cache entry for {short_code}: {e}")
            await self._invalidate_quietly(short_code)
            return None

    async def _invalidate_quietly(self, short_code: str) -> None:
        try:
            await self.invalidate(short_code)
        except UpstreamUnavailable:
            self.logger.warning(f"Could not invalidate cache entry for {short_code}")

    def _schedule_increment(self, short_code: str) -> None:
        task = asyncio.create_task(self._increment_in_background(short_code))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _increment_in_background(self, short_code: str) -> None:
        try:
            record = await self.store.increment_clicks(short_code)
        except Exception as e:
            self.logger.error(f"Failed to update clicks for {short_code}: {e!r}")
            return

        if record is None:
            self.logger.warning(f"Dropped click for {short_code}: record no longer exists")
