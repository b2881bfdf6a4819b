"""Pydantic schemas for API requests and responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(CamelModel):
    """Request to shorten a URL.

    Fields are loosely typed here; the service validates them so that
    every malformed request gets the same 400 error shape.
    """

    original_url: Optional[str] = Field(None, description="The URL to shorten")
    expires_in_days: Optional[float] = Field(None, description="Optional lifetime in days")
    custom_code: Optional[str] = Field(None, description="Optional custom short code (3-20 letters or digits)")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "originalUrl": "https://example.com/very/long/path/to/resource",
                },
                {
                    "originalUrl": "https://github.com/user/repo",
                    "expiresInDays": 7,
                    "customCode": "myrepo",
                },
            ]
        },
    )


class ShortenResponse(CamelModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The assigned short code")
    original_url: str = Field(..., description="The original long URL")
    short_url: str = Field(..., description="The complete short URL")
    qr_code: str = Field(..., description="URL of the QR code image for the short URL")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp, if any")


class AnalyticsResponse(CamelModel):
    """Click analytics for one short link."""

    short_code: str
    original_url: str
    clicks: int
    created_at: datetime
    expires_at: Optional[datetime] = None


class ListResponse(CamelModel):
    """The caller's short links, newest first."""

    count: int
    urls: List[AnalyticsResponse]


class DeleteResponse(CamelModel):
    message: str
    short_code: str


class QRCodeResponse(CamelModel):
    short_code: str
    short_url: str
    qr_code: str = Field(..., description="PNG QR code as a data URL")


class CacheStatsResponse(CamelModel):
    cached_urls: int
    cache_enabled: bool
    redis_info: Dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
