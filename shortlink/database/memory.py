"""In-process record store for development and tests."""

import logging
from typing import Optional, List, Dict
from datetime import datetime
from dataclasses import replace

from ..errors import CodeConflictError
from .base import ShortLinkStoreBase
from .models import ShortLink, ensure_utc, utcnow


class InMemoryShortLinkStore(ShortLinkStoreBase):
    """Dictionary-backed store.
    
    Every operation completes without awaiting, so on a single event loop
    each call is atomic with respect to other coroutines; that gives the
    same conditional-insert and atomic-increment guarantees as PostgreSQL.
    Records are copied on the way in and out so callers never share state
    with the store.
    """
    
    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[str, ShortLink] = {}
    
    async def find_by_code(self, short_code: str) -> Optional[ShortLink]:
        record = self._records.get(short_code)
        return replace(record) if record else None
    
    async def short_code_exists(self, short_code: str) -> bool:
        return short_code in self._records
    
    async def create_unique(
        self,
        short_code: str,
        original_url: str,
        expires_at: Optional[datetime] = None,
        owner_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        if short_code in self._records:
            self.logger.warning(f"Short code already exists: {short_code}")
            raise CodeConflictError(short_code)
        
        record = ShortLink(
            short_code=short_code,
            original_url=original_url,
            created_at=ensure_utc(created_at) or utcnow(),
            expires_at=ensure_utc(expires_at),
            clicks=0,
            owner_id=owner_id,
        )
        self._records[short_code] = record
        self.logger.info(f"Created short URL: {short_code} -> {original_url}")
        return replace(record)
    
    async def increment_clicks(self, short_code: str, by: int = 1) -> Optional[ShortLink]:
        if by < 1:
            raise ValueError("by must be positive")
        record = self._records.get(short_code)
        if record is None:
            return None
        record.clicks += by
        return replace(record)
    
    async def delete_by_code(self, short_code: str) -> bool:
        return self._records.pop(short_code, None) is not None
    
    async def list_by_owner(self, owner_id: str) -> List[ShortLink]:
        owned = [replace(r) for r in self._records.values() if r.owner_id == owner_id]
        owned.sort(key=lambda r: r.created_at, reverse=True)
        return owned
    
    async def health_check(self) -> bool:
        return True
    
    async def close(self) -> None:
        self._records.clear()
