"""
Integration tests for the viewer aggregates.

Tests:
- GET /api/users/me/projects
- GET /api/users/me/squads
- GET /api/users/me/stats
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import RepositoryFactory, SquadFactory, SquadMemberFactory


@pytest.fixture
async def memberships(db_session: AsyncSession, user, other_user):
    """
    ``user`` is in three squads over two repositories:
    two on ``recent`` (one created, one joined) and one on ``undated``.
    """
    now = datetime.now(timezone.utc)
    recent = await RepositoryFactory.create_async(db_session, name="recent", last_commit_at=now - timedelta(days=5))
    undated = await RepositoryFactory.create_async(db_session, name="undated", last_commit_at=None)
    stale = await RepositoryFactory.create_async(db_session, name="stale", last_commit_at=now - timedelta(days=900))

    own = await SquadFactory.create_with_creator_async(db_session, repo_id=recent.id, created_by=user.id, name="Own")
    joined = await SquadFactory.create_with_creator_async(db_session, repo_id=recent.id, created_by=other_user.id, name="Joined")
    await SquadMemberFactory.create_async(
        db_session, squad_id=joined.id, user_id=user.id, role="qa", joined_at=now + timedelta(seconds=1)
    )
    far = await SquadFactory.create_with_creator_async(db_session, repo_id=undated.id, created_by=other_user.id, name="Far")
    await SquadMemberFactory.create_async(
        db_session, squad_id=far.id, user_id=user.id, role="docs", joined_at=now + timedelta(seconds=2)
    )
    # Not a member here
    await SquadFactory.create_with_creator_async(db_session, repo_id=stale.id, created_by=other_user.id, name="Other")
    await db_session.commit()
    return {"recent": recent, "undated": undated, "own": own, "joined": joined, "far": far}


@pytest.mark.asyncio
class TestMyProjects:

    async def test_unique_projects_sorted_by_activity(self, client: AsyncClient, memberships, auth_headers):
        response = await client.get("/api/users/me/projects", headers=auth_headers)

        assert response.status_code == 200
        projects = response.json()["projects"]
        assert [p["name"] for p in projects] == ["recent", "undated"]
        assert projects[0]["squad_count"] == 2
        assert projects[1]["squad_count"] == 1
        assert projects[1]["last_activity"] is None
        assert projects[0]["url"] == f"/repositories/{memberships['recent'].id}"

    async def test_requires_session(self, client: AsyncClient):
        response = await client.get("/api/users/me/projects")

        assert response.status_code == 401

    async def test_empty(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/users/me/projects", headers=auth_headers)

        assert response.json() == {"projects": []}


@pytest.mark.asyncio
class TestMySquads:

    async def test_newest_membership_first(self, client: AsyncClient, memberships, auth_headers):
        response = await client.get("/api/users/me/squads", headers=auth_headers)

        assert response.status_code == 200
        squads = response.json()["squads"]
        assert [s["name"] for s in squads] == ["Far", "Joined", "Own"]
        assert [s["role"] for s in squads] == ["docs", "qa", "creator"]
        assert squads[1]["member_count"] == 2
        assert squads[0]["project"]["name"] == "undated"


@pytest.mark.asyncio
class TestMyStats:

    async def test_counts(self, client: AsyncClient, memberships, user, auth_headers):
        response = await client.get("/api/users/me/stats", headers=auth_headers)

        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["total_projects"] == 2
        assert stats["total_squads"] == 3
        assert stats["total_contributions"] == 0
        assert stats["account_created"] is not None
