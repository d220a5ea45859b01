"""
Viewer API Endpoints

Aggregates for the signed-in user's dashboard.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_db, require_session
from app.core.session import SessionData
from app.schemas.dashboard import MyProjectList, MySquadList, MyStatsEnvelope
from app.services import dashboard

router = APIRouter()


@router.get("/projects", response_model=MyProjectList)
async def my_projects(
    session: SessionData = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    """Repositories the user works on through squads, most recently active first."""
    return {"projects": await dashboard.my_projects(db, session.user_id)}


@router.get("/squads", response_model=MySquadList)
async def my_squads(
    session: SessionData = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    return {"squads": await dashboard.my_squads(db, session.user_id)}


@router.get("/stats", response_model=MyStatsEnvelope)
async def my_stats(
    session: SessionData = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    return {"stats": await dashboard.my_stats(db, session.user_id)}
