"""
End-to-end test for the revival flow with two users.

Tests a complete multi-user squad workflow.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories.github import github_repo_payload
from tests.factories.user import UserFactory, session_headers


@pytest.mark.e2e
@pytest.mark.asyncio
class TestSquadCollaborationFlow:
    """Import a repository, build a squad around it, hand work over."""

    async def test_complete_revival_flow(self, client: AsyncClient, db_session: AsyncSession, github_stub):
        """
        1. User A imports an abandoned repository
        2. User A creates a squad for it
        3. User B browses the catalog and joins, asking for 'moderator'
        4. User B is stored as 'member' and cannot delete the squad
        5. Both users see the project on their dashboards
        6. User B leaves; User A deletes the squad
        """
        user_a = await UserFactory.create_async(db_session, username="alice")
        user_b = await UserFactory.create_async(db_session, username="bob")
        await db_session.commit()
        headers_a = session_headers(user_a)
        headers_b = session_headers(user_b)

        # Step 1
        github_stub.add_repository(
            github_repo_payload("legacy/widget", open_issues_count=120),
            last_commit_at=datetime.now(timezone.utc) - timedelta(days=400),
        )
        imported = await client.post(
            "/api/repositories/import",
            headers=headers_a,
            json={"repoFullName": "legacy/widget"},
        )
        assert imported.status_code == 201
        repo = imported.json()["repository"]
        assert repo["abandonment_status"] == "abandoned"
        assert repo["maintenance_score"] == 48

        # Step 2
        created = await client.post(
            "/api/squads",
            headers=headers_a,
            json={"repo_id": repo["id"], "name": "Widget Revival"},
        )
        assert created.status_code == 201
        squad_id = created.json()["squad"]["id"]

        # Step 3
        catalog = await client.get("/api/repositories", params={"status": "abandoned"})
        assert [r["id"] for r in catalog.json()["repositories"]] == [repo["id"]]

        listed = await client.get(f"/api/repositories/{repo['id']}/squads", headers=headers_b)
        assert listed.json()["squads"][0]["is_user_member"] is False

        joined = await client.post(f"/api/squads/{squad_id}/members", headers=headers_b, json={"role": "moderator"})
        assert joined.status_code == 201

        # Step 4
        assert joined.json()["member"]["role"] == "member"
        forbidden = await client.delete(f"/api/squads/{squad_id}", headers=headers_b)
        assert forbidden.status_code == 403

        # Step 5
        for headers in (headers_a, headers_b):
            projects = await client.get("/api/users/me/projects", headers=headers)
            assert [p["id"] for p in projects.json()["projects"]] == [repo["id"]]

        detail = await client.get(f"/api/squads/{squad_id}", headers=headers_b)
        assert detail.json()["squad"]["member_count"] == 2
        assert detail.json()["squad"]["user_role"] == "member"

        # Step 6
        left = await client.delete(f"/api/squads/{squad_id}/members", headers=headers_b)
        assert left.status_code == 200

        deleted = await client.delete(f"/api/squads/{squad_id}", headers=headers_a)
        assert deleted.status_code == 200

        gone = await client.get(f"/api/squads/{squad_id}")
        assert gone.status_code == 404
