"""
Integration tests for session endpoints.

Tests:
- GET /api/auth/me
- POST /api/auth/logout
"""

import base64

import pytest
from httpx import AsyncClient

from app.api.dependencies import get_session_manager


@pytest.mark.asyncio
class TestMe:
    """Test GET /api/auth/me."""

    async def test_returns_current_user(self, client: AsyncClient, user, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["user"]
        assert data["id"] == user.id
        assert data["github_id"] == user.github_id
        assert data["username"] == user.username

    async def test_no_session(self, client: AsyncClient):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    async def test_garbage_cookie(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers={"Cookie": "phoenix_session=garbage"})

        assert response.status_code == 401

    async def test_non_finite_issue_time_is_anonymous(self, client: AsyncClient):
        raw = b'{"user_id":1,"github_id":1,"username":"x","created_at":Infinity}'
        token = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        cookie = {"Cookie": f"phoenix_session={token}"}

        me = await client.get("/api/auth/me", headers=cookie)
        squads = await client.get("/api/squads", headers=cookie)

        assert me.status_code == 401
        assert squads.status_code == 200
        assert squads.json() == {"squads": []}

    async def test_expired_session(self, client: AsyncClient, user):
        manager = get_session_manager()
        issued = 1_000_000  # epoch ms, decades ago
        token = manager.issue(
            {"user_id": user.id, "github_id": user.github_id, "username": user.username},
            now=issued,
        )

        response = await client.get("/api/auth/me", headers={"Cookie": f"phoenix_session={token}"})

        assert response.status_code == 401

    async def test_deleted_user(self, client: AsyncClient):
        token = get_session_manager().issue({"user_id": 9999, "github_id": 1, "username": "gone"})

        response = await client.get("/api/auth/me", headers={"Cookie": f"phoenix_session={token}"})

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
class TestLogout:
    """Test POST /api/auth/logout."""

    async def test_clears_cookie(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/auth/logout", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("phoenix_session=")
        assert "Max-Age=0" in cookie

    async def test_without_session(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 200
