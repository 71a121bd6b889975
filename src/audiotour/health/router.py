"""Liveness, readiness and version probes. Not rate limited."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.config import get_settings
from audiotour.database import get_session
from audiotour.redis_client import get_redis, redis_enabled

router = APIRouter(tags=["Health"])


async def _database_status(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return f"error: {exc}"
    return "ok"


async def _redis_status() -> str:
    if not redis_enabled():
        return "disabled"
    try:
        await get_redis().ping()
    except Exception as exc:  # noqa: BLE001
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """The process is up and serving requests."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_session)) -> JSONResponse:  # noqa: B008
    """
    Ready when the database answers. Redis only backs rate limiting, so a
    disabled Redis still counts as ready while an unreachable one degrades.
    Answers 503 when not ready so orchestrators stop routing traffic here.
    """
    checks: dict[str, Any] = {
        "database": await _database_status(db),
        "redis": await _redis_status(),
    }
    ready = checks["database"] == "ok" and checks["redis"] in ("ok", "disabled")
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
