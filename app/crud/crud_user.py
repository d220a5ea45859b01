# app/crud/crud_user.py
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User

# Profile fields refreshed on every login
MUTABLE_PROFILE_FIELDS = (
    "username",
    "email",
    "avatar_url",
    "bio",
    "location",
    "website_url",
    "twitter_username",
)


def profile_from_github(github_user: Dict[str, Any], email: Optional[str]) -> Dict[str, Any]:
    """Map a GitHub ``/user`` payload onto User columns."""
    return {
        "username": github_user.get("login"),
        "email": email,
        "avatar_url": github_user.get("avatar_url"),
        "bio": github_user.get("bio"),
        "location": github_user.get("location"),
        "website_url": github_user.get("blog") or None,
        "twitter_username": github_user.get("twitter_username"),
    }


async def get_user_by_github_id(db: AsyncSession, github_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.github_id == github_id))
    return result.scalar_one_or_none()


def _apply_profile(user: User, profile: Dict[str, Any]) -> None:
    for field in MUTABLE_PROFILE_FIELDS:
        if field in profile:
            setattr(user, field, profile[field])


async def upsert_user_by_external_id(db: AsyncSession, github_id: int, profile: Dict[str, Any]) -> User:
    """
    Create or update the User keyed by its GitHub id and commit.

    A concurrent insert for the same github_id (double-clicked callback)
    surfaces as IntegrityError; the insert is then retried as an update.

    Raises:
        SQLAlchemyError: Any other persistence failure
    """
    user = await get_user_by_github_id(db, github_id)
    if user is not None:
        _apply_profile(user, profile)
        await db.commit()
        await db.refresh(user)
        return user

    user = User(github_id=github_id)
    _apply_profile(user, profile)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        user = await get_user_by_github_id(db, github_id)
        if user is None:
            raise
        _apply_profile(user, profile)
        await db.commit()

    await db.refresh(user)
    return user
