"""API routes implementation."""

from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool
from datetime import datetime, timezone

from .dependencies import (
    create_rate_limit,
    creator_identity,
    general_rate_limit,
    get_service,
    require_identity,
)
from .schemas import (
    ShortenRequest,
    ShortenResponse,
    AnalyticsResponse,
    ListResponse,
    DeleteResponse,
    QRCodeResponse,
    CacheStatsResponse,
    HealthResponse,
    ErrorResponse,
)
from shortlink.auth import Identity
from shortlink.database.models import ShortLink
from shortlink.errors import InvalidInput
from shortlink.qr import SUPPORTED_FORMATS, generate_qr_data_url, generate_qr_png, generate_qr_svg
from shortlink.service import ShortLinkService
from shortlink.common.url_builder import build_short_url, build_qr_url

router = APIRouter()

AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
}


def _public_base(request: Request) -> Tuple[str, str]:
    """Base URL and path prefix clients should use to reach this service."""
    return request.state.public_base_url, request.state.path_prefix


def _analytics(record: ShortLink) -> AnalyticsResponse:
    return AnalyticsResponse(
        short_code=record.short_code,
        original_url=record.original_url,
        clicks=record.clicks,
        created_at=record.created_at,
        expires_at=record.expires_at,
    )


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        503: {"model": ErrorResponse, "description": "Backing service unavailable"},
        **AUTH_ERRORS,
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a custom short code and a lifetime in days.",
    dependencies=[Depends(create_rate_limit)],
)
async def shorten_url(
    request: Request,
    body: ShortenRequest,
    identity: Optional[Identity] = Depends(creator_identity),
    service: ShortLinkService = Depends(get_service),
):
    """Create a shortened URL."""
    record = await service.create_short_url(
        original_url=body.original_url,
        expires_in_days=body.expires_in_days,
        custom_code=body.custom_code,
        owner=identity,
    )

    base_url, path_prefix = _public_base(request)
    return ShortenResponse(
        short_code=record.short_code,
        original_url=record.original_url,
        short_url=build_short_url(record.short_code, base_url, path_prefix),
        qr_code=build_qr_url(record.short_code, base_url, path_prefix),
        expires_at=record.expires_at,
    )


@router.get(
    "/analytics/{short_code}",
    response_model=AnalyticsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
        **AUTH_ERRORS,
    },
    summary="Get click analytics",
    description="Get click count and lifetime information for a short URL.",
    dependencies=[Depends(general_rate_limit), Depends(require_identity)],
)
async def get_analytics(short_code: str, service: ShortLinkService = Depends(get_service)):
    record = await service.get_analytics(short_code)
    return _analytics(record)


@router.get(
    "/urls",
    response_model=ListResponse,
    responses=AUTH_ERRORS,
    summary="List my short URLs",
    description="List the caller's short URLs, newest first.",
    dependencies=[Depends(general_rate_limit)],
)
async def list_urls(
    identity: Identity = Depends(require_identity),
    service: ShortLinkService = Depends(get_service),
):
    records = await service.list_short_urls(identity)
    return ListResponse(count=len(records), urls=[_analytics(r) for r in records])


@router.delete(
    "/urls/{short_code}",
    response_model=DeleteResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not own the short URL"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
        **AUTH_ERRORS,
    },
    summary="Delete short URL",
    description="Delete a short URL owned by the caller.",
    dependencies=[Depends(general_rate_limit)],
)
async def delete_url(
    short_code: str,
    identity: Identity = Depends(require_identity),
    service: ShortLinkService = Depends(get_service),
):
    await service.delete_short_url(short_code, identity)
    return DeleteResponse(message="Short URL deleted successfully", short_code=short_code)


@router.get(
    "/qr/{short_code}",
    responses={
        200: {"content": {"image/png": {}, "image/svg+xml": {}, "application/json": {}}},
        400: {"model": ErrorResponse, "description": "Unsupported format"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
        410: {"model": ErrorResponse, "description": "Short code expired"},
    },
    summary="QR code for a short URL",
    description="Render the short URL as a QR code (png, svg, or json with a data URL).",
    dependencies=[Depends(general_rate_limit)],
)
async def get_qr_code(
    request: Request,
    short_code: str,
    format: str = Query("png"),
    service: ShortLinkService = Depends(get_service),
):
    if format not in SUPPORTED_FORMATS:
        raise InvalidInput("Invalid format. Supported formats: png, svg, json")

    await service.get_live_link(short_code)
    base_url, path_prefix = _public_base(request)
    short_url = build_short_url(short_code, base_url, path_prefix)

    if format == "png":
        content = await run_in_threadpool(generate_qr_png, short_url)
        return Response(content=content, media_type="image/png")
    if format == "svg":
        content = await run_in_threadpool(generate_qr_svg, short_url)
        return Response(content=content, media_type="image/svg+xml")

    data_url = await run_in_threadpool(generate_qr_data_url, short_url)
    return QRCodeResponse(short_code=short_code, short_url=short_url, qr_code=data_url)


@router.get(
    "/cache/stats",
    response_model=CacheStatsResponse,
    responses=AUTH_ERRORS,
    summary="Cache statistics",
    description="Number of cached short URLs and the cache server's stats.",
    dependencies=[Depends(general_rate_limit), Depends(require_identity)],
)
async def get_cache_stats(service: ShortLinkService = Depends(get_service)):
    stats = await service.get_cache_statistics()
    return CacheStatsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(service: ShortLinkService = Depends(get_service)):
    """Health check endpoint for load balancers and monitoring."""
    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
