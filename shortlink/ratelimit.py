"""Fixed window rate limiting."""

import time
from typing import Callable, Dict, Tuple


class FixedWindowRateLimiter:
    """Fixed window rate limiter keyed by client.

    Windows are aligned to multiples of ``window_seconds``, so a client can
    burst up to twice the limit across a window boundary.
    """

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.time):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self.windows: Dict[str, Tuple[int, int]] = {}

    def hit(self, key: str) -> Tuple[bool, int]:
        """Record a request.

        Returns:
            (allowed, retry_after_seconds); retry_after is 0 when allowed
        """
        now = self.clock()
        window_start = int(now // self.window_seconds) * self.window_seconds

        start, count = self.windows.get(key, (window_start, 0))
        if start < window_start:
            start, count = window_start, 0

        if count >= self.limit:
            retry_after = max(1, int(start + self.window_seconds - now))
            return False, retry_after

        self.windows[key] = (start, count + 1)
        self._evict(window_start)
        return True, 0

    def reset(self, key: str) -> None:
        self.windows.pop(key, None)

    def _evict(self, current_window: int) -> None:
        # Keep memory bounded by dropping clients from past windows
        if len(self.windows) > 10000:
            self.windows = {k: v for k, v in self.windows.items() if v[0] >= current_window}
