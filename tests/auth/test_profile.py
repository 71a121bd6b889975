"""Tests for reading and updating the caller's profile."""

import pytest
from httpx import AsyncClient

from audiotour.auth import service as auth_service
from tests.helpers import auth_headers, make_token, register


class TestMe:
    async def test_me_returns_stored_profile(self, authed_client: AsyncClient, registered_user: dict):
        response = await authed_client.get("/api/auth/me")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == registered_user["email"]

    async def test_me_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "Access token required"

    async def test_me_for_deleted_user(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers=auth_headers(make_token(9999)))
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"


class TestProfileUpdate:
    async def test_update_names(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/profile", json={
            "first_name": "Grace",
            "last_name": "Hopper",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        assert body["data"]["user"]["first_name"] == "Grace"
        assert body["data"]["user"]["last_name"] == "Hopper"

    async def test_partial_update_keeps_other_fields(self, authed_client: AsyncClient):
        await authed_client.put("/api/auth/profile", json={"first_name": "Grace", "last_name": "Hopper"})
        response = await authed_client.put("/api/auth/profile", json={"last_name": "Murray"})
        user = response.json()["data"]["user"]
        assert user["first_name"] == "Grace"
        assert user["last_name"] == "Murray"

    async def test_update_email(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/profile", json={"email": "New.Address@Example.com"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "new.address@example.com"

        me = await authed_client.get("/api/auth/me")
        assert me.json()["data"]["user"]["email"] == "new.address@example.com"

    async def test_update_to_own_email_allowed(self, authed_client: AsyncClient, registered_user: dict):
        response = await authed_client.put("/api/auth/profile", json={"email": registered_user["email"]})
        assert response.status_code == 200

    async def test_email_taken_by_another_user(self, authed_client: AsyncClient):
        await register(authed_client, email="taken@example.com")
        response = await authed_client.put("/api/auth/profile", json={"email": "TAKEN@example.com"})
        assert response.status_code == 409
        assert response.json()["error"] == "Email already taken"

    async def test_email_claimed_between_check_and_write(
        self, authed_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ):
        await register(authed_client, email="claimed@example.com")
        real_taken = auth_service._email_taken
        calls = []

        async def taken(db, email, exclude_user_id=None):
            calls.append(email)
            if len(calls) == 1:
                return False
            return await real_taken(db, email, exclude_user_id)

        monkeypatch.setattr(auth_service, "_email_taken", taken)
        response = await authed_client.put("/api/auth/profile", json={"email": "claimed@example.com"})
        assert response.status_code == 409
        assert response.json()["error"] == "Email already taken"
        assert len(calls) == 2

    async def test_empty_update_rejected(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/profile", json={})
        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_invalid_email_rejected(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/profile", json={"email": "nope"})
        assert response.status_code == 400

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.put("/api/auth/profile", json={"first_name": "Nobody"})
        assert response.status_code == 401
