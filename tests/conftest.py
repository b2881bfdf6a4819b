"""Pytest configuration and fixtures."""

import fnmatch
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from config import Config
from shortlink.auth import create_access_token
from shortlink.database.cache import RedisCache
from shortlink.database.memory import InMemoryShortLinkStore
from shortlink.service import ShortLinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app

TEST_JWT_SECRET = "test-secret"


class FakeRedis:
    """Async stand-in for redis.asyncio.Redis with decode_responses=True.

    Set ``fail = True`` to make every call raise a connection error.
    """

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.fail = False
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("Connection refused")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def ping(self):
        self._check()
        return True

    async def scan_iter(self, match=None, count=None):
        self._check()
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def info(self, section=None):
        self._check()
        return {"keyspace_hits": 0, "keyspace_misses": 0}

    async def aclose(self):
        self.closed = True


class FrozenClock:
    """Controllable replacement for ``utcnow``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(logger) -> InMemoryShortLinkStore:
    return InMemoryShortLinkStore(logger=logger)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis, logger) -> RedisCache:
    return RedisCache(ttl_seconds=3600, logger=logger, client=fake_redis)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
async def service(store, cache, short_code_generator, logger, clock) -> AsyncGenerator[ShortLinkService, None]:
    """Create service instance backed by the in-memory store and fake cache."""
    service = ShortLinkService(
        store=store,
        cache=cache,
        short_code_generator=short_code_generator,
        logger=logger,
        clock=clock,
    )

    yield service

    await service.cache_aside.drain()


@pytest.fixture
def config() -> Config:
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        jwt_secret=TEST_JWT_SECRET,
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(store, cache, service, config):
    """Create test FastAPI app."""
    return create_app(
        store_instance=store,
        cache_instance=cache,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def make_auth_headers():
    def _make(user_id: str) -> dict:
        token = create_access_token(user_id, TEST_JWT_SECRET)
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def auth_headers(make_auth_headers):
    return make_auth_headers("alice")


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
