"""
Repository Import Service

Turns an ``owner/name`` string into a scored catalog entry:
1. validate the name shape (no remote call for malformed input)
2. fetch metadata and the latest commit date from GitHub
3. score abandonment and maintenance
4. persist, mapping unique-constraint violations to ``duplicate``
5. append a best-effort activity entry
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.result import Err, ErrorKind, Ok, Result
from app.core.scoring import score_repository
from app.crud.crud_repository import (
    get_repository,
    get_repository_by_full_name,
    get_repository_by_github_id,
)
from app.models.repository import Repository
from app.services.activity import record_activity
from app.services.github import GitHubClient, GitHubRepoData
from app.logging import get_logger

logger = get_logger(__name__)

FULL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*)/[A-Za-z0-9._-]+$")

# Deprecated, maintenance-mode or long-untouched projects used to seed a fresh catalog
CURATED_REPOSITORIES = [
    "request/request",
    "moment/moment",
    "browserify/browserify",
    "kriskowal/q",
    "jquery/jquery",
    "janl/mustache.js",
    "marionettejs/backbone.marionette",
    "jashkenas/backbone",
    "meteor/meteor",
    "senchalabs/connect",
    "Automattic/mongoose",
    "socketio/socket.io",
    "gulpjs/gulp",
]


@dataclass
class SeedReport:
    seeded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def normalize_full_name(full_name: Optional[str]) -> Optional[str]:
    """Return the trimmed ``owner/name`` or None when the shape is wrong."""
    if not isinstance(full_name, str):
        return None
    candidate = full_name.strip()
    if not FULL_NAME_PATTERN.match(candidate):
        return None
    return candidate


def _apply_metadata(repository: Repository, data: GitHubRepoData, last_commit_at: Optional[datetime], now: datetime) -> None:
    for key, value in data.model_dump().items():
        setattr(repository, key, value)

    score = score_repository(last_commit_at, data.open_issues_count, now=now)
    repository.last_commit_at = last_commit_at
    repository.abandonment_status = score.abandonment_status.value
    repository.maintenance_score = score.maintenance_score
    repository.is_analyzed = True
    repository.last_analyzed_at = now


class RepositoryImportService:
    def __init__(self, github: GitHubClient):
        self.github = github

    async def _fetch(self, full_name: str):
        repo_result = await self.github.get_repository(full_name)
        if isinstance(repo_result, Err):
            return repo_result, None
        last_commit_at = await self.github.get_latest_commit_date(full_name)
        return repo_result, last_commit_at

    async def import_repository(
        self,
        db: AsyncSession,
        full_name: Optional[str],
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Result[Repository]:
        """
        Import a repository by ``owner/name``.

        Errors:
            INVALID_INPUT, DUPLICATE, NOT_FOUND_UPSTREAM, UPSTREAM_FAILURE,
            UPSTREAM_TIMEOUT, PERSISTENCE_FAILURE
        """
        name = normalize_full_name(full_name)
        if name is None:
            return Err(ErrorKind.INVALID_INPUT, "Invalid repository name. Format should be: owner/repo")

        if await get_repository_by_full_name(db, name) is not None:
            return Err(ErrorKind.DUPLICATE, "Repository already exists in the database")

        repo_result, last_commit_at = await self._fetch(name)
        if isinstance(repo_result, Err):
            return repo_result
        data = repo_result.value

        now = now or datetime.now(timezone.utc)
        repository = Repository()
        _apply_metadata(repository, data, last_commit_at, now)

        db.add(repository)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return Err(ErrorKind.DUPLICATE, "Repository already exists in the database")
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to persist imported repository", full_name=data.full_name)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to import repository")

        await db.refresh(repository)
        logger.info(
            "Repository imported",
            repo_id=repository.id,
            full_name=repository.full_name,
            status=repository.abandonment_status,
            score=repository.maintenance_score,
        )

        await record_activity(
            db,
            activity_type="repo_added",
            title=f"{repository.full_name} added to the catalog",
            user_id=user_id,
            repo_id=repository.id,
            details={"repo_name": repository.full_name, "stars": repository.stars_count},
            reload=(repository,),
        )
        return Ok(repository)

    async def refresh_repository(
        self,
        db: AsyncSession,
        repo_id: int,
        now: Optional[datetime] = None,
    ) -> Result[Repository]:
        """
        Re-import an existing repository, upserting by GitHub id.

        The row matched by ``github_repo_id`` is updated; a renamed
        repository keeps its catalog id.
        """
        repository = await get_repository(db, repo_id)
        if repository is None:
            return Err(ErrorKind.NOT_FOUND, "Repository not found")

        repo_result, last_commit_at = await self._fetch(repository.full_name)
        if isinstance(repo_result, Err):
            return repo_result
        data = repo_result.value

        target = await get_repository_by_github_id(db, data.github_repo_id) or repository
        now = now or datetime.now(timezone.utc)
        _apply_metadata(target, data, last_commit_at, now)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return Err(ErrorKind.DUPLICATE, "Another repository already uses this name")
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to persist refreshed repository", repo_id=repo_id)
            return Err(ErrorKind.PERSISTENCE_FAILURE, "Failed to refresh repository")

        await db.refresh(target)
        logger.info("Repository refreshed", repo_id=target.id, status=target.abandonment_status)
        return Ok(target)

    async def seed_repositories(
        self,
        db: AsyncSession,
        names: Iterable[str] = CURATED_REPOSITORIES,
    ) -> SeedReport:
        """Import each name, skipping ones already catalogued."""
        report = SeedReport()
        for full_name in names:
            result = await self.import_repository(db, full_name)
            if isinstance(result, Ok):
                report.seeded.append(result.value.full_name)
            elif result.kind == ErrorKind.DUPLICATE:
                report.skipped.append(full_name)
            else:
                report.errors.append(f"{full_name}: {result.message}")

        logger.great("Seeding complete", seeded=len(report.seeded), skipped=len(report.skipped), errors=len(report.errors))
        return report
