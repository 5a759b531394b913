"""Sliding-window rate limiting keyed by client address."""
from __future__ import annotations

import logging
import math
import time
from collections import deque
from threading import Lock

from fastapi import Request

from app.errors import TooManyRequests

log = logging.getLogger("uvicorn.error")


class SlidingWindowRateLimiter:
    """At most max_requests per window_seconds per key.

    Each key keeps the timestamps of its requests inside the window; a request
    is refused when the window is full. Refused requests are not recorded.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._hits: dict[str, deque[float]] = {}

    def hit(self, key: str) -> float | None:
        """Record a request for key. Returns None if allowed, else seconds until a slot frees up."""
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return hits[0] + self.window_seconds - now
            hits.append(now)
            return None

    def prune(self) -> None:
        """Drop keys with no requests left in the window."""
        cutoff = self._clock() - self.window_seconds
        with self._lock:
            for key in [k for k, v in self._hits.items() if not v or v[-1] <= cutoff]:
                del self._hits[key]


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def auth_rate_limit(request: Request) -> None:
    """Dependency shared by every auth route."""
    limiter: SlidingWindowRateLimiter = request.app.state.auth_rate_limiter
    ip = client_address(request)
    retry_after = limiter.hit(ip)
    if retry_after is not None:
        log.warning("[RateLimit] Auth limit reached for %s on %s", ip, request.url.path)
        raise TooManyRequests(retry_after=max(1, math.ceil(retry_after)))
