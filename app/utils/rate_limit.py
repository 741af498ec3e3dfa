import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.errors import RateLimited, http_error_handler

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    """Admits at most ``limit`` hits per key inside any ``window`` seconds."""

    def __init__(self, limit: int, window: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, key: str, now: float) -> None:
        hits = self._hits.get(key)
        if hits is None:
            return
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if not hits:
            del self._hits[key]

    def _sweep(self, now: float) -> None:
        # drop callers whose every hit has left the window
        for key in list(self._hits):
            self._prune(key, now)
        self._last_sweep = now

    def hit(self, key: str) -> Tuple[bool, float]:
        """Record a hit for ``key``.

        Returns ``(allowed, retry_after)``; ``retry_after`` is 0 when allowed.
        Rejected hits are not recorded.
        """
        now = self.clock()
        if now - self._last_sweep >= self.window:
            self._sweep(now)
        else:
            self._prune(key, now)

        hits = self._hits.get(key)
        if hits is not None and len(hits) >= self.limit:
            return False, hits[0] + self.window - now

        self._hits.setdefault(key, deque()).append(now)
        return True, 0.0

    def tracked(self) -> int:
        """Number of callers with hits still inside the window"""
        return len(self._hits)


def client_identity(request: Request) -> str:
    if request.client is not None:
        return request.client.host
    return "anonymous"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: SlidingWindowLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        if self.limiter.limit <= 0:
            return await call_next(request)

        identity = client_identity(request)
        allowed, retry_after = self.limiter.hit(identity)
        if not allowed:
            logger.warning("Rate limit exceeded for %s", identity)
            # middleware sits outside the exception handlers, so render directly
            exc = RateLimited(
                "Too many requests",
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )
            return await http_error_handler(request, exc)
        return await call_next(request)
