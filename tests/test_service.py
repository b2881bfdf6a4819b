"""Tests for service layer."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from shortlink.auth import Identity
from shortlink.service import ShortLinkService
from shortlink.errors import (
    CodeTaken,
    Forbidden,
    InvalidCode,
    InvalidInput,
    LinkExpired,
    LinkNotFound,
    UpstreamUnavailable,
)

ALICE = Identity("alice")
BOB = Identity("bob")


@pytest.mark.asyncio
class TestCreateShortURL:
    """Test short link creation."""

    async def test_create_short_url(self, service, sample_urls):
        """Test creating a short URL."""
        record = await service.create_short_url(sample_urls[0], owner=ALICE)

        assert len(record.short_code) == 6
        assert record.original_url == sample_urls[0]
        assert record.owner_id == "alice"
        assert record.clicks == 0
        assert record.expires_at is None

    async def test_create_with_custom_code(self, service, sample_urls):
        """Test creating with custom code."""
        record = await service.create_short_url(sample_urls[0], custom_code="custom123")

        assert record.short_code == "custom123"

    async def test_duplicate_custom_code(self, service, sample_urls):
        """Test creating duplicate custom code."""
        await service.create_short_url(sample_urls[0], custom_code="dup123")

        with pytest.raises(CodeTaken):
            await service.create_short_url(sample_urls[1], custom_code="dup123")

    async def test_invalid_custom_code(self, service, sample_urls):
        with pytest.raises(InvalidCode) as exc_info:
            await service.create_short_url(sample_urls[0], custom_code="no")
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("url", ["", None, "not-a-url", "ftp://example.com/file", "https://"])
    async def test_invalid_url(self, service, url):
        """Test creating with invalid URL."""
        with pytest.raises(InvalidInput):
            await service.create_short_url(url)

    async def test_expiry_from_days(self, service, clock, sample_urls):
        record = await service.create_short_url(sample_urls[0], expires_in_days=7)

        assert record.expires_at == clock() + timedelta(days=7)

    async def test_fractional_days(self, service, clock, sample_urls):
        record = await service.create_short_url(sample_urls[0], expires_in_days=0.5)

        assert record.expires_at == clock() + timedelta(hours=12)

    @pytest.mark.parametrize("days", [-1, math.inf, math.nan, 1e7, 1e9, 1e12])
    async def test_invalid_expiry(self, service, sample_urls, days):
        with pytest.raises(InvalidInput):
            await service.create_short_url(sample_urls[0], expires_in_days=days)

    async def test_create_does_not_populate_cache(self, service, fake_redis, sample_urls):
        await service.create_short_url(sample_urls[0])

        assert fake_redis.data == {}


@pytest.mark.asyncio
class TestRedirect:

    async def test_redirect_counts_clicks(self, service, store, sample_urls):
        record = await service.create_short_url(sample_urls[0])

        assert await service.redirect(record.short_code) == sample_urls[0]
        assert (await store.find_by_code(record.short_code)).clicks == 1

        assert await service.redirect(record.short_code) == sample_urls[0]
        await service.cache_aside.drain()
        assert (await store.find_by_code(record.short_code)).clicks == 2

    @pytest.mark.parametrize("code", ["bad-code", "a" * 21, "with space", ""])
    async def test_impossible_codes_not_found(self, service, store, monkeypatch, code):
        async def unexpected(short_code):
            raise AssertionError("store should not be queried")

        monkeypatch.setattr(store, "find_by_code", unexpected)

        with pytest.raises(LinkNotFound):
            await service.redirect(code)

    async def test_expired(self, service, clock, sample_urls):
        record = await service.create_short_url(sample_urls[0], expires_in_days=1)

        clock.advance(days=1)
        assert await service.redirect(record.short_code) == sample_urls[0]

        clock.advance(seconds=1)
        with pytest.raises(LinkExpired):
            await service.redirect(record.short_code)


@pytest.mark.asyncio
class TestAnalytics:

    async def test_get_analytics(self, service, sample_urls):
        """Test analytics do not count as clicks."""
        record = await service.create_short_url(sample_urls[0])
        await service.redirect(record.short_code)

        await service.get_analytics(record.short_code)
        analytics = await service.get_analytics(record.short_code)

        assert analytics.clicks == 1
        assert analytics.original_url == sample_urls[0]

    async def test_analytics_unknown(self, service):
        with pytest.raises(LinkNotFound):
            await service.get_analytics("nope42")

    async def test_get_live_link(self, service, clock, sample_urls):
        record = await service.create_short_url(sample_urls[0], expires_in_days=1)

        live = await service.get_live_link(record.short_code)
        assert live.clicks == 0

        clock.advance(days=2)
        with pytest.raises(LinkExpired):
            await service.get_live_link(record.short_code)


@pytest.mark.asyncio
class TestDeleteShortURL:

    async def test_owner_deletes(self, service, fake_redis, sample_urls):
        record = await service.create_short_url(sample_urls[0], owner=ALICE)
        await service.redirect(record.short_code)
        assert f"url:{record.short_code}" in fake_redis.data

        await service.delete_short_url(record.short_code, ALICE)

        assert f"url:{record.short_code}" not in fake_redis.data
        with pytest.raises(LinkNotFound):
            await service.redirect(record.short_code)

    async def test_non_owner_forbidden(self, service, store, sample_urls):
        record = await service.create_short_url(sample_urls[0], owner=ALICE)

        with pytest.raises(Forbidden):
            await service.delete_short_url(record.short_code, BOB)

        assert await store.find_by_code(record.short_code) is not None

    async def test_ownerless_record_forbidden(self, service, sample_urls):
        record = await service.create_short_url(sample_urls[0])

        with pytest.raises(Forbidden):
            await service.delete_short_url(record.short_code, ALICE)

    async def test_delete_unknown(self, service):
        with pytest.raises(LinkNotFound):
            await service.delete_short_url("nope42", ALICE)

    async def test_cache_down_during_delete(self, service, store, fake_redis, sample_urls):
        record = await service.create_short_url(sample_urls[0], owner=ALICE)
        fake_redis.fail = True

        with pytest.raises(UpstreamUnavailable):
            await service.delete_short_url(record.short_code, ALICE)

        # The record itself is gone; only the cache entry may linger
        assert await store.find_by_code(record.short_code) is None


@pytest.mark.asyncio
class TestListAndStats:

    async def test_list_newest_first(self, service, store):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i, code in enumerate(["first1", "second", "third3"]):
            await store.create_unique(
                code, f"https://example.com/{code}", owner_id="alice",
                created_at=base + timedelta(minutes=i),
            )
        await store.create_unique("bobs01", "https://example.com/bob", owner_id="bob")

        records = await service.list_short_urls(ALICE)

        assert [r.short_code for r in records] == ["third3", "second", "first1"]

    async def test_list_empty(self, service):
        assert await service.list_short_urls(BOB) == []

    async def test_cache_statistics(self, service, sample_urls):
        for url in sample_urls:
            record = await service.create_short_url(url)
            await service.redirect(record.short_code)

        stats = await service.get_cache_statistics()

        assert stats["cache_enabled"]
        assert stats["cached_urls"] == len(sample_urls)
        assert "keyspace_hits" in stats["redis_info"]

    async def test_cache_statistics_without_cache(self, store, logger):
        service = ShortLinkService(store=store, cache=None, logger=logger)

        stats = await service.get_cache_statistics()
        assert stats == {"cached_urls": 0, "cache_enabled": False, "redis_info": {}}

    async def test_health_check(self, service, fake_redis):
        assert await service.health_check() == {"database": True, "cache": True, "overall": True}

        fake_redis.fail = True
        assert await service.health_check() == {"database": True, "cache": False, "overall": False}

    async def test_close_flushes_pending_clicks(self, service, store, fake_redis, sample_urls):
        record = await service.create_short_url(sample_urls[0])
        await service.redirect(record.short_code)
        await service.redirect(record.short_code)
        clicks = []

        original_close = store.close

        async def capture_then_close():
            clicks.append((await store.find_by_code(record.short_code)).clicks)
            await original_close()

        store.close = capture_then_close
        await service.close()

        assert clicks == [2]
        assert fake_redis.closed
