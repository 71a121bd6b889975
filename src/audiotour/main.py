"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from audiotour.auth.jwt import get_token_service
from audiotour.auth.router import router as auth_router
from audiotour.config import get_settings
from audiotour.database import close_db, get_session, init_db
from audiotour.health.router import router as health_router
from audiotour.locations.router import router as locations_router
from audiotour.locations.seed import seed_locations
from audiotour.middleware import setup_middleware
from audiotour.redis_client import close_redis, init_redis
from audiotour.users.router import router as users_router

logger = structlog.get_logger()


async def _seed_catalogue() -> None:
    """Insert the default locations into an empty catalogue. Never fatal."""
    try:
        async for db in get_session():
            inserted = await seed_locations(db)
            logger.info("catalogue_seed_checked", inserted=inserted)
    except (SQLAlchemyError, OSError) as e:
        # Tables missing (migrations not applied) or database unreachable
        logger.warning("catalogue_seed_failed", error=str(e))


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    # Raises here, at boot, when production runs without a JWT secret
    get_token_service()
    await init_db(settings.database_url, settings)
    await init_redis(settings.redis_url, timeout_seconds=settings.db_connect_timeout_seconds)

    if settings.seed_default_locations:
        await _seed_catalogue()

    logger.info("startup_complete", environment=settings.environment, version=settings.app_version)
    try:
        yield
    finally:
        await close_db()
        await close_redis()


def create_app() -> FastAPI:
    """Build the app: middleware, exception handlers and the four route groups."""
    settings = get_settings()

    app = FastAPI(
        title="Audio Tour API",
        description="Accounts, the location catalogue, favorites and listening progress",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    for router in (health_router, auth_router, locations_router, users_router):
        app.include_router(router)

    return app


app = create_app()
