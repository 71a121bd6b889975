"""Shared test fixtures.

Tests run against a throwaway SQLite file (aiosqlite) and without Redis, so
rate limiting is inactive. Settings are pinned through AUDIOTOUR_* variables
before anything reads them.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator

_TEST_DB_DIR = tempfile.mkdtemp(prefix="audiotour_test_")

os.environ["AUDIOTOUR_DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["AUDIOTOUR_JWT_SECRET"] = "test-secret-that-is-at-least-32-bytes-long"
os.environ["AUDIOTOUR_REDIS_URL"] = ""
os.environ["AUDIOTOUR_ENVIRONMENT"] = "test"
os.environ["AUDIOTOUR_ADMIN_ROLE_REQUIRED"] = "false"
os.environ["AUDIOTOUR_PASSWORD_HASH_TIME_COST"] = "1"
os.environ["AUDIOTOUR_PASSWORD_HASH_MEMORY_COST"] = "8192"
os.environ["AUDIOTOUR_SEED_DEFAULT_LOCATIONS"] = "false"
os.environ["AUDIOTOUR_LOG_FORMAT"] = "console"
os.environ["AUDIOTOUR_LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from audiotour.config import get_settings  # noqa: E402
from audiotour.database import close_db, get_engine, get_session, init_db  # noqa: E402
from audiotour.db.base import Base  # noqa: E402
from audiotour.main import create_app  # noqa: E402
from tests.helpers import create_location, register, reset_caches  # noqa: E402

reset_caches()


@pytest_asyncio.fixture
async def app() -> AsyncGenerator[FastAPI, None]:
    """Application with a freshly created schema."""
    reset_caches()
    application = create_app()
    settings = get_settings()
    await init_db(settings.database_url, settings)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield application

    application.dependency_overrides.clear()
    await close_db()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client bound to the app (lifespan is not run)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for test setup and assertions."""
    async for session in get_session():
        yield session


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """A user registered via the API. Returns dict with credentials and token."""
    return await register(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client sending the registered user's bearer token."""
    client.headers["Authorization"] = f"Bearer {registered_user['token']}"
    return client


@pytest_asyncio.fixture
async def location(authed_client: AsyncClient, registered_user: dict) -> dict:
    """One location created by the registered user."""
    return await create_location(authed_client, registered_user["token"])


@pytest.fixture
def production_settings(monkeypatch: pytest.MonkeyPatch):
    """Run a test with ENVIRONMENT=production."""
    monkeypatch.setenv("AUDIOTOUR_ENVIRONMENT", "production")
    get_settings.cache_clear()
    yield get_settings()
    monkeypatch.undo()
    reset_caches()
