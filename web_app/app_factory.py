"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlink.errors import RateLimited, ShortLinkError
from shortlink.ratelimit import FixedWindowRateLimiter
from .api import api_router
from .web import web_router
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware

logger = logging.getLogger("shortlink.web")


def _build_limiters(config):
    if not config.rate_limit_enabled:
        return None, None
    general = FixedWindowRateLimiter(
        config.rate_limit_general, config.rate_limit_general_window_seconds
    )
    create = FixedWindowRateLimiter(
        config.rate_limit_create, config.rate_limit_create_window_seconds
    )
    return general, create


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShortLinkError)
    async def shortlink_error_handler(request: Request, exc: ShortLinkError):
        headers = None
        if isinstance(exc, RateLimited) and exc.retry_after:
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ())[1:])
            message = f"Invalid input: {location} {errors[0].get('msg', '')}".strip()
        else:
            message = "Invalid input."
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error."})


def create_app(
    store_instance,
    cache_instance,
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store_instance: Record store instance
        cache_instance: Cache instance
        service_instance: Service instance
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Shortlink",
        description="URL shortening service with click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.store = store_instance
    app.state.cache = cache_instance
    app.state.service = service_instance
    app.state.config = config
    app.state.general_limiter, app.state.create_limiter = _build_limiters(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ForwardedHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    _register_error_handlers(app)

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Registered last: the catch-all /{short_code} must not shadow other routes
    app.include_router(web_router, tags=["Redirect"])

    return app
