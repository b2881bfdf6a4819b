"""Data models for short links."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """A link is dead once ``now`` is strictly past ``expires_at``."""
    return expires_at is not None and now > expires_at


@dataclass
class ShortLink:
    """Represents a short link record in the store."""
    
    short_code: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    clicks: int = 0
    owner_id: Optional[str] = None
    
    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the link is logically dead at ``now``."""
        return is_expired(self.expires_at, now or utcnow())
    
    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "clicks": self.clicks,
            "owner_id": self.owner_id,
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "ShortLink":
        """Create from a dictionary or database row mapping."""
        return cls(
            short_code=data["short_code"],
            original_url=data["original_url"],
            created_at=ensure_utc(_parse_datetime(data["created_at"])),
            expires_at=ensure_utc(_parse_datetime(data.get("expires_at"))),
            clicks=data.get("clicks", 0) or 0,
            owner_id=data.get("owner_id"),
        )


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
