"""Public redirect route."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Follow a short URL",
    responses={
        302: {"description": "Redirect to the original URL"},
        404: {"description": "Short code not found"},
        410: {"description": "Short code expired"},
    },
)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL (this also counts the click)."""
    service = request.app.state.service
    
    original_url = await service.redirect(short_code)
    
    # Temporary redirect so repeat visits are counted
    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
