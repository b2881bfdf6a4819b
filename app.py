#!/usr/bin/env python3
"""
Main entry point for the shortlink service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + asyncpg connection pool + redis.asyncio). Set WORKERS > 1 for
multi-process scaling across CPU cores (each worker has its own DB pool).

Usage:
    python app.py

Environment variables:
    DATABASE_URL - Record store URL (postgresql://... or memory://)
    DB_CREATE_TABLES - Set to true to create the table on startup
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    JWT_SECRET - Secret used to verify bearer tokens
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.database import RedisCache, create_store
from shortlink.service import ShortLinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting shortlink service...")

    store = create_store(
        config.database_url,
        pool_max_size=config.db_pool_max_size,
        command_timeout_seconds=config.db_command_timeout_seconds,
        create_tables=config.db_create_tables,
        logger=logger,
    )
    logger.info(f"Using record store {type(store).__name__}")

    # Initialize cache (optional)
    if config.redis_url:
        logger.info("Connecting to Redis")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")
        cache = None

    generator = ShortCodeGenerator(default_length=config.short_code_length)
    service = ShortLinkService(
        store=store,
        cache=cache,
        short_code_generator=generator,
        logger=logger,
        cache_ttl_seconds=config.cache_ttl_seconds,
        max_collision_retries=config.max_collision_retries,
        fallback_code_length=config.fallback_code_length,
        max_insert_attempts=config.max_insert_attempts,
    )

    app.state.store = store
    app.state.cache = cache
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down shortlink service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Shortlink Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'jwt_secret', 'database_url', 'redis_url'})}")

    # Instances are created in the lifespan
    app = create_app(
        store_instance=None,
        cache_instance=None,
        service_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
