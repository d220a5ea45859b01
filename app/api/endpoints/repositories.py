"""
Repositories API Endpoints

Catalog of imported GitHub repositories: import, browse, discover and
refresh. Reads are public; refreshing requires a session.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_db,
    get_github_client,
    get_import_service,
    get_optional_session,
    get_squad_service,
    require_session,
)
from app.core.result import raise_for_error
from app.core.scoring import score_repository
from app.core.session import SessionData
from app.crud.crud_repository import get_repository, increment_views, list_repositories
from app.schemas.repository import (
    DiscoveredRepository,
    DiscoverOut,
    RepositoryEnvelope,
    RepositoryImport,
    RepositoryList,
)
from app.schemas.squad import SquadList, SquadWithMembership
from app.services.github import GitHubClient
from app.services.repository_import import RepositoryImportService
from app.services.squads import SquadService

router = APIRouter()


@router.post("/import", response_model=RepositoryEnvelope, status_code=status.HTTP_201_CREATED)
async def import_repository(
    payload: RepositoryImport,
    session: Optional[SessionData] = Depends(get_optional_session),
    service: RepositoryImportService = Depends(get_import_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Import a repository by ``owner/name``.

    - 400: malformed name
    - 404: not found on GitHub
    - 409: already in the catalog
    - 502: GitHub failed or timed out
    """
    result = await service.import_repository(
        db,
        payload.repo_full_name,
        user_id=session.user_id if session else None,
    )
    return {"repository": raise_for_error(result)}


@router.get("", response_model=RepositoryList)
async def list_catalog(
    language: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    query: Optional[str] = Query(None, max_length=200),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List catalog repositories, most starred first.

    Query parameters:
    - language: exact language, or "all"
    - status: abandonment status, or "all"
    - query: substring of name, full name or description
    """
    repositories = await list_repositories(
        db,
        language=language,
        status=status_filter,
        query=query,
        skip=skip,
        limit=limit,
    )
    return {"repositories": repositories}


@router.get("/discover", response_model=DiscoverOut)
async def discover(
    language: Optional[str] = Query(None),
    min_stars: int = Query(50, ge=0),
    page: int = Query(1, ge=1, le=34),
    github: GitHubClient = Depends(get_github_client),
):
    """
    Search GitHub for popular repositories without a push in the last year.

    Results are scored from their last push date and are not stored.
    """
    result = await github.search_abandoned_repos(language=language, min_stars=min_stars, page=page)
    search = raise_for_error(result)

    repositories = []
    for repo in search.repositories:
        score = score_repository(repo.last_push_at, repo.open_issues_count)
        repositories.append(
            DiscoveredRepository(
                **repo.model_dump(
                    include={
                        "github_repo_id",
                        "full_name",
                        "name",
                        "description",
                        "language",
                        "stars_count",
                        "forks_count",
                        "open_issues_count",
                        "last_push_at",
                    }
                ),
                abandonment_status=score.abandonment_status.value,
                maintenance_score=score.maintenance_score,
            )
        )
    return {"repositories": repositories, "total": search.total, "page": page}


@router.get("/{repo_id}", response_model=RepositoryEnvelope)
async def get_catalog_repository(repo_id: int, db: AsyncSession = Depends(get_db)):
    """Fetch one repository. Each call counts as a view."""
    if await increment_views(db, repo_id) == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Repository not found",
        )
    repository = await get_repository(db, repo_id)
    return {"repository": repository}


@router.post("/{repo_id}/refresh", response_model=RepositoryEnvelope)
async def refresh_repository(
    repo_id: int,
    session: SessionData = Depends(require_session),
    service: RepositoryImportService = Depends(get_import_service),
    db: AsyncSession = Depends(get_db),
):
    """Re-fetch metadata from GitHub and recompute the scores."""
    result = await service.refresh_repository(db, repo_id)
    return {"repository": raise_for_error(result)}


@router.get("/{repo_id}/squads", response_model=SquadList)
async def list_repository_squads(
    repo_id: int,
    session: Optional[SessionData] = Depends(get_optional_session),
    service: SquadService = Depends(get_squad_service),
    db: AsyncSession = Depends(get_db),
):
    """Active squads of a repository, with the viewer's membership when signed in."""
    items = await service.list_squads(db, repo_id=repo_id, viewer_id=session.user_id if session else None)
    return {"squads": [SquadWithMembership.from_listing(item) for item in items]}
