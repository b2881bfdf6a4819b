"""Record store and cache layer for the shortlink service."""

import logging
from typing import Optional

from .base import ShortLinkStoreBase
from .postgres import ShortLinkPostgresStore
from .memory import InMemoryShortLinkStore
from .cache import RedisCache
from .models import ShortLink

__all__ = [
    "ShortLinkStoreBase",
    "ShortLinkPostgresStore",
    "InMemoryShortLinkStore",
    "RedisCache",
    "ShortLink",
    "create_store",
]


def create_store(
    db_config: str,
    pool_max_size: int = 10,
    command_timeout_seconds: float = 10.0,
    create_tables: bool = False,
    logger: Optional[logging.Logger] = None,
) -> ShortLinkStoreBase:
    """Build a record store from its connection URL scheme."""
    if db_config.startswith("memory://"):
        return InMemoryShortLinkStore(db_config, logger=logger)
    if db_config.startswith(("postgresql://", "postgres://")):
        return ShortLinkPostgresStore(
            db_config,
            pool_max_size=pool_max_size,
            command_timeout_seconds=command_timeout_seconds,
            create_tables=create_tables,
            logger=logger,
        )
    raise ValueError(f"Unsupported database URL: {db_config}")
