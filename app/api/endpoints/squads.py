"""
Squads API Endpoints

Squads are named working groups attached to a repository. Anyone can read
them; creating, joining and leaving need a session; only the creator may
update or delete a squad.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_db, get_optional_session, get_squad_service, require_session
from app.core.result import raise_for_error
from app.core.session import SessionData
from app.schemas.squad import (
    SquadCreate,
    SquadDetail,
    SquadDetailEnvelope,
    SquadEnvelope,
    SquadList,
    SquadUpdate,
    SquadWithMembership,
)
from app.schemas.squad_member import MemberEnvelope, MemberList, MemberWithUser, SquadJoin
from app.schemas.user import MessageOut
from app.services.squads import SquadService

router = APIRouter()


def _viewer_id(session: Optional[SessionData]) -> Optional[int]:
    return session.user_id if session else None


# ==================== Squad CRUD ====================

@router.get("", response_model=SquadList)
async def list_squads(
    repo_id: Optional[int] = Query(None),
    session: Optional[SessionData] = Depends(get_optional_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """List active squads, optionally for one repository, newest first."""
    items = await service.list_squads(db, repo_id=repo_id, viewer_id=_viewer_id(session))
    return {"squads": [SquadWithMembership.from_listing(item) for item in items]}


@router.post("", response_model=SquadEnvelope, status_code=status.HTTP_201_CREATED)
async def create_squad(
    squad_data: SquadCreate,
    session: SessionData = Depends(require_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a squad for a repository.

    The caller becomes its creator.
    """
    result = await service.create_squad(
        db,
        repo_id=squad_data.repo_id,
        name=squad_data.name,
        description=squad_data.description,
        creator_id=session.user_id,
    )
    return {"squad": raise_for_error(result), "message": "Squad created successfully"}


@router.get("/{squad_id}", response_model=SquadDetailEnvelope)
async def get_squad(
    squad_id: int,
    session: Optional[SessionData] = Depends(get_optional_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    result = await service.get_squad_detail(db, squad_id, viewer_id=_viewer_id(session))
    return {"squad": SquadDetail.from_detail(raise_for_error(result))}


@router.patch("/{squad_id}", response_model=SquadEnvelope)
async def update_squad(
    squad_id: int,
    squad_update: SquadUpdate,
    session: SessionData = Depends(require_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a squad.

    Only the creator can update; other callers get 403.
    """
    result = await service.update_squad(
        db,
        squad_id,
        session.user_id,
        squad_update.model_dump(exclude_unset=True),
    )
    return {"squad": raise_for_error(result), "message": "Squad updated successfully"}


@router.delete("/{squad_id}", response_model=MessageOut)
async def delete_squad(
    squad_id: int,
    session: SessionData = Depends(require_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """Delete a squad and all its memberships (creator only)."""
    name = raise_for_error(await service.delete_squad(db, squad_id, session.user_id))
    return {"message": f'Squad "{name}" deleted successfully'}


# ==================== Squad Members ====================

@router.get("/{squad_id}/members", response_model=MemberList)
async def list_members(
    squad_id: int,
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    rows = await service.list_members(db, squad_id)
    return {"members": [MemberWithUser.from_row(row) for row in rows]}


@router.post("/{squad_id}/members", response_model=MemberEnvelope, status_code=status.HTTP_201_CREATED)
async def join_squad(
    squad_id: int,
    join_data: Optional[SquadJoin] = None,
    session: SessionData = Depends(require_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Join a squad.

    Requesting 'creator' or 'moderator' silently yields 'member'.
    """
    requested_role = join_data.role if join_data else None
    result = await service.join_squad(db, squad_id, session.user_id, requested_role)
    member = raise_for_error(result)
    squad = await service.get(db, squad_id)
    return {"member": member, "message": f'Successfully joined "{squad.name}"'}


@router.delete("/{squad_id}/members", response_model=MessageOut)
async def leave_squad(
    squad_id: int,
    session: SessionData = Depends(require_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """Leave a squad. Leaving a squad you are not in is not an error."""
    squad = raise_for_error(await service.leave_squad(db, squad_id, session.user_id))
    if squad is None:
        return {"message": "Left squad successfully"}
    return {"message": f'Left "{squad.name}" successfully'}
