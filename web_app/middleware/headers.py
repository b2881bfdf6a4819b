"""Forwarded headers middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortlink.common.headers import build_base_url, get_client_address, get_forwarded_path_prefix


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Resolve where each request came from and how clients address us.

    Sets on ``request.state``:

    * ``public_base_url``: ``scheme://host`` to put in generated links
    * ``path_prefix``: mount path stripped by the proxy, else the configured one
    * ``client_address``: key for rate limiting and logs
    """

    async def dispatch(self, request: Request, call_next: Callable):
        headers = dict(request.headers)
        config = request.app.state.config

        request.state.public_base_url = build_base_url(
            headers,
            fallback_base_url=config.base_url,
            request_scheme=request.url.scheme,
            request_host=headers.get("host"),
        )
        request.state.path_prefix = get_forwarded_path_prefix(headers) or config.path_prefix
        request.state.client_address = get_client_address(
            headers,
            request.client.host if request.client else None,
        )

        return await call_next(request)
