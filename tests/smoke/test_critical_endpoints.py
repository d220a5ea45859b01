"""
Smoke tests for critical endpoints.

Fast tests to detect critical breaks in CI/CD pipeline.
Target: <10 seconds total execution time.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.smoke
@pytest.mark.asyncio
class TestCriticalEndpoints:
    """Smoke tests for critical application endpoints."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_request_id_header(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "smoke-1"})

        assert response.headers["X-Request-ID"] == "smoke-1"

    async def test_login_redirect(self, client: AsyncClient):
        response = await client.get("/api/auth/github")

        assert response.status_code == 307

    async def test_catalog_list(self, client: AsyncClient):
        response = await client.get("/api/repositories")

        assert response.status_code == 200
        assert response.json() == {"repositories": []}

    async def test_me_requires_session(self, client: AsyncClient):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    async def test_authenticated_stats(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/users/me/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["stats"]["total_squads"] == 0

    async def test_seed_hidden_outside_debug(self, client: AsyncClient):
        response = await client.post("/api/seed")

        assert response.status_code == 404

    async def test_openapi_schema(self, client: AsyncClient):
        response = await client.get("/openapi.json")

        assert response.status_code == 200
        assert "/api/squads/{squad_id}" in response.json()["paths"]
