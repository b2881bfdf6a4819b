"""Core business logic for the shortlink service."""

from .shortcode import ShortCodeGenerator
from .assignment import CodeAssigner
from .cache_aside import CacheAsideLayer, CachedLink, Resolution, ResolutionStatus
from .redirect import RedirectResolver
from .service import ShortLinkService

__all__ = [
    "ShortCodeGenerator",
    "CodeAssigner",
    "CacheAsideLayer",
    "CachedLink",
    "Resolution",
    "ResolutionStatus",
    "RedirectResolver",
    "ShortLinkService",
]
