"""Redirect resolution on top of the cache-aside layer."""

import logging
from typing import Optional

from .cache_aside import CacheAsideLayer, ResolutionStatus
from .errors import LinkExpired, LinkNotFound


class RedirectResolver:
    """Turn a short code into a redirect target or a terminal error."""

    def __init__(self, cache_aside: CacheAsideLayer, logger: Optional[logging.Logger] = None):
        self.cache_aside = cache_aside
        self.logger = logger or logging.getLogger(__name__)

    async def redirect(self, short_code: str) -> str:
        """Return the original URL for a live code.

        Raises:
            LinkNotFound: the code was never issued or has been deleted
            LinkExpired: the code exists but its expiry has passed
            UpstreamUnavailable: the record store failed
        """
        resolution = await self.cache_aside.resolve(short_code)

        if resolution.status is ResolutionStatus.NOT_FOUND:
            self.logger.warning(f"Short code not found: {short_code}")
            raise LinkNotFound()
        if resolution.status is ResolutionStatus.EXPIRED:
            self.logger.info(f"Short code expired: {short_code}")
            raise LinkExpired()

        return resolution.entry.original_url
