"""
In-memory sliding-window rate limiter, keyed per caller (e.g. "analytics:<ip>").
Single-process only; a Redis-backed limiter would keep the same check() contract.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass

from cinegrok.app.core.logging_config import get_logger

logger = get_logger("utils.rate_limit")


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_seconds: float


class SlidingWindowLimiter:
    def __init__(self, limit: int, window_seconds: float):
        self.limit = limit
        self.window = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, now: float | None = None) -> RateLimitResult:
        """Record one request for key and report whether it is within the limit."""
        now = time.monotonic() if now is None else now
        cutoff = now - self.window
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                reset = hits[0] + self.window - now
                logger.debug("Rate limited key=%s hits=%d", key, len(hits))
                return RateLimitResult(False, 0, max(0.0, reset))
            hits.append(now)
            return RateLimitResult(True, self.limit - len(hits), self.window)

    def clear(self) -> None:
        """Clear all entries (for tests)."""
        with self._lock:
            self._hits.clear()
