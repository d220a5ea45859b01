"""
Viewer aggregates for the dashboard: my projects, my squads, my stats.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.repository import Repository
from app.models.squad import Squad
from app.models.squad_member import SquadMember
from app.models.user import User


def project_summary(repo: Repository) -> Dict[str, Any]:
    return {
        "id": repo.id,
        "name": repo.name,
        "full_name": repo.full_name,
        "description": repo.description,
        "abandonment_status": repo.abandonment_status,
        "maintenance_score": repo.maintenance_score,
        "language": repo.language,
        "url": f"/repositories/{repo.id}",
    }


def _activity_sort_key(project: Dict[str, Any]):
    last = project["last_activity"]
    if last is None:
        return (1, 0.0)
    if isinstance(last, datetime):
        return (0, -last.timestamp())
    return (0, 0.0)


async def my_projects(db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
    """
    Unique repositories the user works on through squads, most recently
    committed first; repositories without a known commit go last.
    """
    result = await db.execute(
        select(Repository, func.count(SquadMember.id))
        .join(Squad, Squad.repo_id == Repository.id)
        .join(SquadMember, SquadMember.squad_id == Squad.id)
        .where(SquadMember.user_id == user_id)
        .group_by(Repository.id)
    )

    projects = []
    for repo, squad_count in result.all():
        project = project_summary(repo)
        project.update({
            "last_activity": repo.last_commit_at,
            "stars_count": repo.stars_count,
            "squad_count": squad_count,
        })
        projects.append(project)

    projects.sort(key=_activity_sort_key)
    return projects


async def my_squads(db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
    """Memberships of the user, newest first, with the squad's project."""
    result = await db.execute(
        select(SquadMember, Squad, Repository)
        .join(Squad, Squad.id == SquadMember.squad_id)
        .join(Repository, Repository.id == Squad.repo_id)
        .where(SquadMember.user_id == user_id)
        .order_by(SquadMember.joined_at.desc(), SquadMember.id.desc())
    )
    rows = result.all()

    squad_ids = [squad.id for _, squad, _ in rows]
    counts: Dict[int, int] = {}
    if squad_ids:
        count_result = await db.execute(
            select(SquadMember.squad_id, func.count(SquadMember.id))
            .where(SquadMember.squad_id.in_(squad_ids))
            .group_by(SquadMember.squad_id)
        )
        counts = dict(count_result.all())

    return [
        {
            "id": squad.id,
            "name": squad.name,
            "description": squad.description,
            "member_count": counts.get(squad.id, 0),
            "role": membership.role,
            "joined_at": membership.joined_at,
            "project": project_summary(repo),
        }
        for membership, squad, repo in rows
    ]


async def my_stats(db: AsyncSession, user_id: int) -> Dict[str, Any]:
    account_created = (
        await db.execute(select(User.created_at).where(User.id == user_id))
    ).scalar_one_or_none()

    total_squads = (
        await db.execute(select(func.count(SquadMember.id)).where(SquadMember.user_id == user_id))
    ).scalar() or 0

    total_projects = (
        await db.execute(
            select(func.count(func.distinct(Squad.repo_id)))
            .join(SquadMember, SquadMember.squad_id == Squad.id)
            .where(SquadMember.user_id == user_id)
        )
    ).scalar() or 0

    return {
        "total_projects": total_projects,
        "total_squads": total_squads,
        # TODO: count merged pull requests once contribution tracking lands
        "total_contributions": 0,
        "account_created": account_created,
    }
