"""
Rate limiting for the Capital Code assistant API.

Sliding-window counter per client address. Only paths under the API prefix
are throttled; health, metrics and docs are always served.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Estamos recibiendo muchas solicitudes. Por favor, inténtalo de nuevo en unos minutos."
)


class SlidingWindowLimiter:
    """Allows `limit` hits per `window_seconds` for each key."""

    def __init__(self, limit: int, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}

    def hit(self, key: str) -> Tuple[bool, int, int]:
        """
        Register a hit for `key`.

        Returns:
            (allowed, remaining, retry_after_seconds)
        """
        now = self._clock()
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.limit:
            retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
            return False, 0, retry_after

        hits.append(now)
        return True, self.limit - len(hits), 0

    def prune(self):
        """Forget keys with no hits inside the current window."""
        cutoff = self._clock() - self.window_seconds
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects API calls over the per-minute budget with a 429 body."""

    PRUNE_EVERY = 1000

    def __init__(self, app, requests_per_minute: int = 30, path_prefix: str = "/api/"):
        super().__init__(app)
        self.path_prefix = path_prefix
        self.limiter = SlidingWindowLimiter(limit=requests_per_minute, window_seconds=60)
        self._seen = 0

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        self._seen += 1
        if self._seen % self.PRUNE_EVERY == 0:
            self.limiter.prune()

        client_id = client_address(request)
        allowed, remaining, retry_after = self.limiter.hit(client_id)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_id}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


def client_address(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
