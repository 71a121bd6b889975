"""Optional Redis client, used for rate-limit counters.

Leaving ``AUDIOTOUR_REDIS_URL`` empty turns Redis off: no client is created and
``get_redis`` raises RuntimeError, which callers read as "feature disabled".
"""

from __future__ import annotations

import redis.asyncio as redis

_client: redis.Redis | None = None


def redis_enabled() -> bool:
    return _client is not None


async def init_redis(url: str, timeout_seconds: float = 2.0) -> None:
    """Create the shared client. Connections are opened lazily on first command."""
    global _client  # noqa: PLW0603
    if not url:
        return
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Return the shared client, or raise RuntimeError when Redis is disabled."""
    if _client is None:
        msg = "Redis is not configured (AUDIOTOUR_REDIS_URL is empty or init_redis() was not called)"
        raise RuntimeError(msg)
    return _client
