"""
Activity feed writer.

Entries are written after the primary operation has committed. A failure
here is logged and swallowed so it can never undo the operation it
describes.
"""

from typing import Any, Dict, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_feed import ActivityFeed
from app.logging import get_logger

logger = get_logger(__name__)


async def record_activity(
    db: AsyncSession,
    activity_type: str,
    title: str,
    user_id: Optional[int] = None,
    repo_id: Optional[int] = None,
    description: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    reload: Sequence[Any] = (),
) -> Optional[ActivityFeed]:
    """
    Best-effort insert of an activity entry.

    A rollback expires every instance in the session, so the caller passes
    the objects it is about to return as ``reload``.

    Returns:
        The entry, or None if it could not be stored
    """
    entry = ActivityFeed(
        activity_type=activity_type,
        title=title,
        user_id=user_id,
        repo_id=repo_id,
        description=description,
        details=details or {},
    )
    try:
        db.add(entry)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.warning(
            "Failed to record activity",
            activity_type=activity_type,
            repo_id=repo_id,
            user_id=user_id,
        )
        for instance in reload:
            await db.refresh(instance)
        return None
    return entry
