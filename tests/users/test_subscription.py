"""Tests for subscription updates."""

import pytest
from httpx import AsyncClient

from audiotour.auth.jwt import get_token_service


class TestSubscription:
    @pytest.mark.parametrize(
        ("subscription_type", "is_premium"),
        [("premium", True), ("pro", True), ("free", False)],
    )
    async def test_update(self, authed_client: AsyncClient, subscription_type: str, is_premium: bool):
        response = await authed_client.put("/api/users/subscription", json={
            "subscription_type": subscription_type,
            "is_premium": is_premium,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Subscription updated successfully"
        assert body["data"]["user"]["subscription_type"] == subscription_type
        assert body["data"]["user"]["is_premium"] is is_premium

    async def test_values_stored_as_sent(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/subscription", json={
            "subscription_type": "free",
            "is_premium": True,
        })
        assert response.status_code == 200

        me = await authed_client.get("/api/auth/me")
        user = me.json()["data"]["user"]
        assert user["subscription_type"] == "free"
        assert user["is_premium"] is True

    async def test_existing_token_keeps_old_claims(self, authed_client: AsyncClient, registered_user: dict):
        await authed_client.put("/api/users/subscription", json={"subscription_type": "pro", "is_premium": True})
        claims = get_token_service().verify(registered_user["token"])
        assert claims.subscription_type == "free"
        assert claims.is_premium is False

        login = await authed_client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": registered_user["password"],
        })
        fresh = get_token_service().verify(login.json()["data"]["token"])
        assert fresh.subscription_type == "pro"
        assert fresh.is_premium is True

    async def test_unknown_type_rejected(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/subscription", json={
            "subscription_type": "platinum",
            "is_premium": True,
        })
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "subscription_type"

    async def test_is_premium_required(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/subscription", json={"subscription_type": "pro"})
        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.put("/api/users/subscription", json={
            "subscription_type": "pro",
            "is_premium": True,
        })
        assert response.status_code == 401
