"""Client-side admission control for completion API calls.

A sliding window of admission timestamps: entries older than the window are
evicted on every check, and a call is admitted only while fewer than
``max_calls`` remain. This does not protect against server-side throttling;
a 429 from the API is still reported as a backend failure.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

DEFAULT_MAX_CALLS = 10
DEFAULT_WINDOW_MS = 60_000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    """Sliding-window counter owned by exactly one API client.

    ``clock`` returns the current time in milliseconds; tests inject a fake.
    Check-and-record is done under a lock so concurrent callers can never
    push the admitted count past ``max_calls``.
    """

    def __init__(
        self,
        max_calls: int = DEFAULT_MAX_CALLS,
        window_ms: float = DEFAULT_WINDOW_MS,
        clock: Callable[[], float] | None = None,
    ):
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self.max_calls = max_calls
        self.window_ms = window_ms
        self._clock = clock or _monotonic_ms
        self._calls: list[float] = []
        self._lock = threading.Lock()

    def can_admit(self) -> bool:
        """Record and admit one call, or return False without recording it."""
        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._calls) >= self.max_calls:
                return False
            self._calls.append(now)
            return True

    def time_until_next_slot(self) -> float:
        """Milliseconds until ``can_admit`` would next succeed; 0 if it would now."""
        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._calls) < self.max_calls:
                return 0
            return max(0, self.window_ms - (now - min(self._calls)))

    def _evict(self, now: float) -> None:
        self._calls = [t for t in self._calls if now - t < self.window_ms]
