"""
Seed Endpoint

Fills an empty catalog with a curated list of stale repositories. Only
available in debug/development mode.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_db, get_import_service
from app.helpers.getters import isDebugMode
from app.schemas.repository import SeedOut
from app.services.repository_import import RepositoryImportService

router = APIRouter()


@router.post("", response_model=SeedOut)
async def seed(
    service: RepositoryImportService = Depends(get_import_service),
    db: AsyncSession = Depends(get_db),
):
    if not isDebugMode():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )

    report = await service.seed_repositories(db)
    return {
        "message": f"Seeded {len(report.seeded)} repositories, {len(report.errors)} failed",
        "repos": report.seeded,
        "skipped": report.skipped,
        "errors": report.errors,
    }
