"""Request logging middleware."""

import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortlink.common.logging_config import get_logger


def _client(request: Request) -> str:
    # Set by ForwardedHeadersMiddleware, which runs inside this one
    address = getattr(request.state, "client_address", None)
    if address:
        return address
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and latency.

    Server errors are logged at WARNING, everything else at INFO. Requests
    that raise are logged here and re-raised for the error handlers.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or get_logger("web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.logger.warning(
                f"{_client(request)} {request.method} {request.url.path} raised after {elapsed_ms:.1f}ms"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"{_client(request)} {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)",
        )
        return response
