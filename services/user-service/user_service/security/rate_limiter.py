"""In-memory sliding window limiter used to throttle registrations."""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Callable, Deque, DefaultDict


class SlidingWindowRateLimiter:
    """Thread-safe per-key sliding window limiter for a single process."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._events: DefaultDict[str, Deque[float]] = DefaultDict(deque)
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        """Return ``True`` and record the hit when ``key`` is under its limit."""
        now = self._clock()
        with self._lock:
            hits = self._events[key]
            while hits and now - hits[0] >= self._window:
                hits.popleft()
            if len(hits) >= self._max_requests:
                return False
            hits.append(now)
            return True
