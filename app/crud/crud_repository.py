# app/crud/crud_repository.py
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.repository import Repository


async def get_repository(db: AsyncSession, repo_id: int) -> Optional[Repository]:
    # populate_existing: counters may have changed through bulk UPDATEs
    result = await db.execute(
        select(Repository)
        .where(Repository.id == repo_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_repository_by_full_name(db: AsyncSession, full_name: str) -> Optional[Repository]:
    # GitHub names are case-insensitive
    result = await db.execute(
        select(Repository).where(func.lower(Repository.full_name) == full_name.lower())
    )
    return result.scalar_one_or_none()


async def get_repository_by_github_id(db: AsyncSession, github_repo_id: int) -> Optional[Repository]:
    result = await db.execute(select(Repository).where(Repository.github_repo_id == github_repo_id))
    return result.scalar_one_or_none()


async def increment_views(db: AsyncSession, repo_id: int) -> int:
    """
    Atomically bump views_count with a single UPDATE and commit.

    Returns:
        Number of rows updated (0 when the repository does not exist)
    """
    result = await db.execute(
        update(Repository)
        .where(Repository.id == repo_id)
        .values(views_count=Repository.views_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount


async def list_repositories(
    db: AsyncSession,
    language: Optional[str] = None,
    status: Optional[str] = None,
    query: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
):
    stmt = select(Repository)

    if language and language != "all":
        stmt = stmt.where(Repository.language == language)

    if status and status != "all":
        stmt = stmt.where(Repository.abandonment_status == status)

    if query:
        pattern = f"%{query}%"
        stmt = stmt.where(
            or_(
                Repository.name.ilike(pattern),
                Repository.description.ilike(pattern),
                Repository.full_name.ilike(pattern),
            )
        )

    stmt = stmt.order_by(Repository.stars_count.desc(), Repository.id.asc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()
