"""Fixed-window rate limiting per client IP, counted in Redis.

Without Redis (not configured, or erroring) requests are let through: losing
the limiter must never take the API down with it.
"""

import time
from typing import Any

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from audiotour.redis_client import get_redis, redis_enabled

logger = structlog.get_logger()

# Probes are polled constantly and must never be throttled
EXEMPT_PATHS = frozenset({"/health", "/ready", "/version"})


def window_key(client_ip: str, window_seconds: int, now: float | None = None) -> str:
    """Counter key for the window containing ``now``."""
    window = int(now if now is not None else time.time()) // window_seconds
    return f"audiotour:ratelimit:{client_ip}:{window}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answer 429 once a client IP exceeds ``requests_per_window`` in the current window."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 900) -> None:  # noqa: ANN401
        super().__init__(app)
        self.limit = requests_per_window
        self.window_seconds = window_seconds

    async def _count(self, client_ip: str) -> int | None:
        if not redis_enabled():
            return None
        key = window_key(client_ip, self.window_seconds)
        pipe = get_redis().pipeline()
        pipe.incr(key)
        # One extra second so the key outlives the window boundary
        pipe.expire(key, self.window_seconds + 1)
        try:
            count, _ = await pipe.execute()
        except RedisError as e:
            logger.warning("rate_limit_unavailable", error=str(e))
            return None
        return int(count)

    def _too_many(self) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "success": False,
                "error": "Too many requests",
                "message": "Rate limit exceeded. Try again later.",
            },
            headers={
                "Retry-After": str(self.window_seconds),
                "X-RateLimit-Limit": str(self.limit),
                "X-RateLimit-Remaining": "0",
            },
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        count = await self._count(request.client.host if request.client else "unknown")
        if count is None:
            return await call_next(request)
        if count > self.limit:
            logger.info("rate_limited", count=count, limit=self.limit)
            return self._too_many()

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.limit - count))
        return response
