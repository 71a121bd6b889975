"""Tests for email + password login."""

from httpx import AsyncClient

from audiotour.auth.jwt import get_token_service


class TestLogin:
    async def test_login_success(self, client: AsyncClient, registered_user: dict):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": registered_user["password"],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == registered_user["user_id"]
        claims = get_token_service().verify(body["data"]["token"])
        assert claims.id == registered_user["user_id"]

    async def test_login_email_case_insensitive(self, client: AsyncClient, registered_user: dict):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"].upper(),
            "password": registered_user["password"],
        })
        assert response.status_code == 200

    async def test_wrong_password(self, client: AsyncClient, registered_user: dict):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": "WrongPass1",
        })
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid credentials"

    async def test_unknown_email_indistinguishable(self, client: AsyncClient, registered_user: dict):
        wrong_password = await client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": "WrongPass1",
        })
        unknown_email = await client.post("/api/auth/login", json={
            "email": "nobody@example.com",
            "password": "WrongPass1",
        })
        assert unknown_email.status_code == wrong_password.status_code == 401
        assert unknown_email.json() == wrong_password.json()

    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "someone@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"
