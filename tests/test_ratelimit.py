"""Tests for fixed window rate limiting."""

from shortlink.ratelimit import FixedWindowRateLimiter


class FakeTime:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit():
    limiter = FixedWindowRateLimiter(limit=3, window_seconds=60, clock=FakeTime(1200.0))

    results = [limiter.hit("1.2.3.4") for _ in range(4)]

    assert [allowed for allowed, _ in results] == [True, True, True, False]
    assert results[0][1] == 0


def test_retry_after_points_at_next_window():
    clock = FakeTime(1210.0)
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    limiter.hit("client")
    allowed, retry_after = limiter.hit("client")

    # Window started at 1200 and ends at 1260
    assert not allowed
    assert retry_after == 50


def test_new_window_resets_count():
    clock = FakeTime(1200.0)
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.hit("client")[0]
    assert not limiter.hit("client")[0]

    clock.now = 1260.0
    assert limiter.hit("client")[0]


def test_clients_are_independent():
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60, clock=FakeTime())

    assert limiter.hit("a")[0]
    assert limiter.hit("b")[0]
    assert not limiter.hit("a")[0]


def test_reset():
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60, clock=FakeTime())

    limiter.hit("a")
    limiter.reset("a")

    assert limiter.hit("a")[0]
