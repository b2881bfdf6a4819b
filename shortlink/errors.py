"""Error taxonomy for the shortlink service.

Every error raised towards a caller derives from ``ShortLinkError`` and
carries the HTTP status the routing layer should answer with, plus a
message that is safe to show to clients.
"""

from typing import Optional


class ShortLinkError(Exception):
    """Base class for errors reported to callers."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ShortLinkError):
    """Missing or malformed request data."""

    status_code = 400
    default_message = "Invalid input."


class InvalidCode(InvalidInput):
    """Custom short code does not match the allowed pattern."""

    default_message = "Custom code must be 3-20 alphanumeric characters."


class Unauthorized(ShortLinkError):
    status_code = 401
    default_message = "Access token required."


class Forbidden(ShortLinkError):
    status_code = 403
    default_message = "You do not have permission to modify this short URL."


class LinkNotFound(ShortLinkError):
    status_code = 404
    default_message = "Short URL not found."


class CodeTaken(ShortLinkError):
    status_code = 409
    default_message = "Custom code already taken. Please choose another."


class LinkExpired(ShortLinkError):
    status_code = 410
    default_message = "This short URL has expired."


class RateLimited(ShortLinkError):
    """Client exceeded its request budget."""

    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class SpaceExhausted(ShortLinkError):
    """No free short code found within the retry budget."""

    status_code = 503
    default_message = "Unable to allocate a short code. Please try again."


class UpstreamUnavailable(ShortLinkError):
    """Record store or cache call failed or timed out."""

    status_code = 503
    default_message = "A backing service is unavailable. Please try again."


class CodeConflictError(Exception):
    """Raised by a record store when an insert hits an existing short code.

    Internal to the store/resolver boundary; never shown to callers.
    """

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code already exists: {short_code}")
