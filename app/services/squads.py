"""
Squad Membership Service

CRUD over squads and their members with the two authorization rules of the
platform: only the creator may update or delete a squad, and the join call
cannot grant ``creator``/``moderator``.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import capture_error
from app.core.permissions import SquadRole, is_squad_creator, sanitize_join_role
from app.core.result import Err, ErrorKind, Ok, Result
from app.crud.crud_repository import get_repository
from app.models.squad import Squad
from app.models.squad_member import SquadMember
from app.models.user import User
from app.services.activity import record_activity
from app.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "description", "is_active")


def user_summary(user: Optional[User], *fields: str) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    keys = ("id", "username", "avatar_url") + fields
    return {key: getattr(user, key) for key in keys}


class SquadService:

    # ==================== Reads ====================

    async def get(self, db: AsyncSession, squad_id: int) -> Optional[Squad]:
        result = await db.execute(select(Squad).where(Squad.id == squad_id))
        return result.scalar_one_or_none()

    async def _viewer_roles(self, db: AsyncSession, viewer_id: Optional[int], squad_ids: List[int]) -> Dict[int, str]:
        if viewer_id is None or not squad_ids:
            return {}
        result = await db.execute(
            select(SquadMember.squad_id, SquadMember.role).where(
                SquadMember.user_id == viewer_id,
                SquadMember.squad_id.in_(squad_ids),
            )
        )
        return {squad_id: role for squad_id, role in result.all()}

    async def _member_counts(self, db: AsyncSession, squad_ids: List[int]) -> Dict[int, int]:
        if not squad_ids:
            return {}
        result = await db.execute(
            select(SquadMember.squad_id, func.count(SquadMember.id))
            .where(SquadMember.squad_id.in_(squad_ids))
            .group_by(SquadMember.squad_id)
        )
        return dict(result.all())

    async def list_squads(
        self,
        db: AsyncSession,
        repo_id: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Active squads, newest first, annotated for the viewer.

        Each item carries the squad, its creator summary, member_count,
        is_user_member and user_role.
        """
        stmt = (
            select(Squad, User)
            .join(User, User.id == Squad.created_by, isouter=True)
            .where(Squad.is_active.is_(True))
            .order_by(Squad.created_at.desc(), Squad.id.desc())
        )
        if repo_id is not None:
            stmt = stmt.where(Squad.repo_id == repo_id)

        rows = (await db.execute(stmt)).all()
        squad_ids = [squad.id for squad, _ in rows]
        roles = await self._viewer_roles(db, viewer_id, squad_ids)
        counts = await self._member_counts(db, squad_ids)

        return [
            {
                "squad": squad,
                "creator": user_summary(creator),
                "member_count": counts.get(squad.id, 0),
                "is_user_member": squad.id in roles,
                "user_role": roles.get(squad.id),
            }
            for squad, creator in rows
        ]

    async def list_members(self, db: AsyncSession, squad_id: int) -> List[Dict[str, Any]]:
        """Members oldest first, each with a user summary."""
        result = await db.execute(
            select(SquadMember, User)
            .join(User, User.id == SquadMember.user_id)
            .where(SquadMember.squad_id == squad_id)
            .order_by(SquadMember.joined_at.asc(), SquadMember.id.asc())
        )
        return [
            {"member": member, "user": user_summary(user, "github_id", "bio")}
            for member, user in result.all()
        ]

    async def get_squad_detail(
        self,
        db: AsyncSession,
        squad_id: int,
        viewer_id: Optional[int] = None,
    ) -> Result[Dict[str, Any]]:
        squad = await self.get(db, squad_id)
        if squad is None:
            return Err(ErrorKind.NOT_FOUND, "Squad not found")

        creator = await db.get(User, squad.created_by)
        members = await self.list_members(db, squad_id)
        viewer_role = next(
            (item["member"].role for item in members if viewer_id is not None and item["member"].user_id == viewer_id),
            None,
        )
        return Ok({
            "squad": squad,
            "creator": user_summary(creator),
            "members": members,
            "member_count": len(members),
            "is_user_member": viewer_role is not None,
            "user_role": viewer_role,
        })

    # ==================== Writes ====================

    async def _add_creator(self, db: AsyncSession, squad: Squad, creator_id: int) -> SquadMember:
        membership = SquadMember(squad_id=squad.id, user_id=creator_id, role=SquadRole.CREATOR.value)
        db.add(membership)
        await db.commit()
        return membership

    async def create_squad(
        self,
        db: AsyncSession,
        repo_id: int,
        name: Optional[str],
        description: Optional[str],
        creator_id: int,
    ) -> Result[Squad]:
        """
        Create a squad and its ``creator`` membership.

        The squad is committed first. If the membership insert then fails the
        squad is still returned: the failure is logged and reported to Sentry.
        """
        name = (name or "").strip()
        if not name:
            return Err(ErrorKind.INVALID_INPUT, "repo_id and name are required")

        if await get_repository(db, repo_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Repository not found")

        squad = Squad(
            repo_id=repo_id,
            name=name,
            description=description or None,
            created_by=creator_id,
        )
        db.add(squad)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return Err(ErrorKind.DUPLICATE, "A squad with this name already exists for this project")
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to create squad", repo_id=repo_id, creator_id=creator_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to create squad")
        await db.refresh(squad)
        squad_id = squad.id

        try:
            await self._add_creator(db, squad, creator_id)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Squad created without its creator membership",
                squad_id=squad_id,
                creator_id=creator_id,
            )
            capture_error(
                e,
                context={"squad": {"id": squad_id, "creator_id": creator_id}},
                tags={"partial_failure": "squad_creator"},
            )
            await db.refresh(squad)

        await record_activity(
            db,
            activity_type="squad_created",
            title=f"Squad {squad.name} created",
            user_id=creator_id,
            repo_id=repo_id,
            details={"squad_id": squad.id, "squad_name": squad.name},
            reload=(squad,),
        )
        return Ok(squad)

    async def join_squad(
        self,
        db: AsyncSession,
        squad_id: int,
        user_id: int,
        requested_role: Optional[str] = None,
    ) -> Result[SquadMember]:
        """
        Add the caller to a squad.

        Privileged roles requested here are stored as ``member``.
        """
        squad = await self.get(db, squad_id)
        if squad is None:
            return Err(ErrorKind.NOT_FOUND, "Squad not found")

        if not squad.is_active:
            return Err(ErrorKind.INVALID_INPUT, "This squad is no longer active")

        existing = await db.execute(
            select(SquadMember.id).where(
                SquadMember.squad_id == squad_id,
                SquadMember.user_id == user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            return Err(ErrorKind.DUPLICATE, "You are already a member of this squad")

        role = sanitize_join_role(requested_role)
        if requested_role and role.value != requested_role:
            logger.warning("Join role downgraded", squad_id=squad_id, user_id=user_id, requested=requested_role)

        member = SquadMember(squad_id=squad_id, user_id=user_id, role=role.value)
        db.add(member)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return Err(ErrorKind.DUPLICATE, "You are already a member of this squad")
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to join squad", squad_id=squad_id, user_id=user_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to join squad")
        await db.refresh(member)

        await record_activity(
            db,
            activity_type="squad_joined",
            title=f"New member joined {squad.name}",
            user_id=user_id,
            repo_id=squad.repo_id,
            details={"squad_id": squad.id, "role": member.role},
            reload=(member, squad),
        )
        return Ok(member)

    async def leave_squad(self, db: AsyncSession, squad_id: int, user_id: int) -> Result[Optional[Squad]]:
        """
        Remove the caller's own membership. Leaving twice is not an error.

        Returns:
            Ok(squad or None) so callers can name the squad in messages
        """
        squad = await self.get(db, squad_id)
        try:
            await db.execute(
                delete(SquadMember).where(
                    SquadMember.squad_id == squad_id,
                    SquadMember.user_id == user_id,
                )
            )
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to leave squad", squad_id=squad_id, user_id=user_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to leave squad")
        return Ok(squad)

    async def _get_owned(self, db: AsyncSession, squad_id: int, user_id: int, action: str) -> Result[Squad]:
        squad = await self.get(db, squad_id)
        if squad is None:
            return Err(ErrorKind.NOT_FOUND, "Squad not found")
        if not is_squad_creator(squad, user_id):
            return Err(ErrorKind.FORBIDDEN, f"Only the squad creator can {action} this squad")
        return Ok(squad)

    async def update_squad(
        self,
        db: AsyncSession,
        squad_id: int,
        user_id: int,
        changes: Dict[str, Any],
    ) -> Result[Squad]:
        owned = await self._get_owned(db, squad_id, user_id, "update")
        if isinstance(owned, Err):
            return owned
        squad = owned.value

        changes = dict(changes)
        if "is_active" in changes and changes["is_active"] is None:
            return Err(ErrorKind.INVALID_INPUT, "is_active cannot be null")
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                return Err(ErrorKind.INVALID_INPUT, "Squad name cannot be empty")

        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(squad, field, value)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return Err(ErrorKind.DUPLICATE, "A squad with this name already exists for this project")
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to update squad", squad_id=squad_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to update squad")

        await db.refresh(squad)
        return Ok(squad)

    async def delete_squad(self, db: AsyncSession, squad_id: int, user_id: int) -> Result[str]:
        """
        Hard-delete a squad and its memberships.

        Returns:
            Ok(name of the deleted squad)
        """
        owned = await self._get_owned(db, squad_id, user_id, "delete")
        if isinstance(owned, Err):
            return owned
        squad = owned.value
        name = squad.name

        try:
            await db.execute(delete(SquadMember).where(SquadMember.squad_id == squad_id))
            await db.execute(delete(Squad).where(Squad.id == squad_id))
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to delete squad", squad_id=squad_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to delete squad")

        logger.info("Squad deleted", squad_id=squad_id, user_id=user_id)
        return Ok(name)
