"""Request dependencies: service lookup, authentication, rate limiting."""

from typing import Optional

from fastapi import Depends, Request

from shortlink.auth import Identity, decode_identity, parse_bearer
from shortlink.errors import RateLimited, Unauthorized
from shortlink.service import ShortLinkService


def get_service(request: Request) -> ShortLinkService:
    return request.app.state.service


async def optional_identity(request: Request) -> Optional[Identity]:
    """Caller identity if a valid bearer token is present; bad tokens are ignored."""
    token = parse_bearer(request.headers.get("authorization"))
    if token is None:
        return None

    config = request.app.state.config
    try:
        return decode_identity(token, config.jwt_secret, config.jwt_algorithm)
    except Unauthorized:
        return None


async def require_identity(request: Request) -> Identity:
    """Caller identity; missing or invalid tokens are rejected."""
    token = parse_bearer(request.headers.get("authorization"))
    if token is None:
        raise Unauthorized()

    config = request.app.state.config
    return decode_identity(token, config.jwt_secret, config.jwt_algorithm)


async def creator_identity(request: Request) -> Optional[Identity]:
    """Identity for link creation; anonymous only when the config allows it."""
    if request.app.state.config.allow_anonymous_create:
        return await optional_identity(request)
    return await require_identity(request)


def _client_key(request: Request) -> str:
    address = getattr(request.state, "client_address", None)
    if address:
        return address
    return request.client.host if request.client else "unknown"


async def general_rate_limit(request: Request) -> None:
    limiter = request.app.state.general_limiter
    if limiter is None:
        return
    allowed, retry_after = limiter.hit(_client_key(request))
    if not allowed:
        raise RateLimited("Too many requests from this IP. Please try again later.", retry_after)


async def create_rate_limit(
    request: Request,
    _: None = Depends(general_rate_limit),
) -> None:
    limiter = request.app.state.create_limiter
    if limiter is None:
        return
    allowed, retry_after = limiter.hit(_client_key(request))
    if not allowed:
        raise RateLimited("Too many URLs created from this IP. Please try again later.", retry_after)
