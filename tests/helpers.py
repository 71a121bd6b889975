"""Helpers shared by the API tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.auth.jwt import TokenClaims, get_token_service
from audiotour.auth.password import reset_hasher
from audiotour.config import get_settings
from audiotour.db.models import User
from audiotour.users import service as users_service

TEST_PASSWORD = "SecurePass1"

SAMPLE_LOCATION = {
    "name": "Basilica Cistern",
    "description": "An underground Byzantine water reservoir held up by 336 marble columns.",
    "category": "History",
    "duration": "7 min",
    "rating": 4.6,
    "listeners": 1200,
    "is_premium": False,
    "image_url": "https://example.com/cistern.jpg",
    "audio_url": "https://example.com/cistern.mp3",
    "latitude": 41.0084,
    "longitude": 28.9779,
}


def reset_caches() -> None:
    """Forget cached settings, token service and hasher so env changes apply."""
    get_settings.cache_clear()
    get_token_service.cache_clear()
    reset_hasher()


def make_token(user_id: int, email: str = "someone@example.com", **claims) -> str:
    """Sign a token directly, bypassing registration."""
    return get_token_service().issue(TokenClaims(id=user_id, email=email, **claims))


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(
    client: AsyncClient,
    email: str = "traveller@example.com",
    password: str = TEST_PASSWORD,
    **extra,
) -> dict:
    """Register a user through the API. Returns credentials, user id and token."""
    response = await client.post("/api/auth/register", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {
        "email": email,
        "password": password,
        "user_id": data["user"]["id"],
        "token": data["token"],
        "user": data["user"],
    }


async def create_location(client: AsyncClient, token: str, **overrides) -> dict:
    """Create a location through the API and return its data."""
    response = await client.post(
        "/api/locations",
        json={**SAMPLE_LOCATION, **overrides},
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def promote_to_admin(db: AsyncSession, user_id: int) -> None:
    await db.execute(update(User).where(User.id == user_id).values(role="admin"))
    await db.commit()


def stale_location_check(monkeypatch: pytest.MonkeyPatch) -> None:
    """Let the first location existence check pass, as if the row were deleted right after it."""
    real_exists = users_service.location_exists
    calls: list[int] = []

    async def exists(db: AsyncSession, location_id: int) -> bool:
        calls.append(location_id)
        if len(calls) == 1:
            return True
        return await real_exists(db, location_id)

    monkeypatch.setattr(users_service, "location_exists", exists)
