"""
Pydantic schemas for catalog repositories.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RepositoryImport(BaseModel):
    """Body of POST /api/repositories/import"""
    model_config = ConfigDict(populate_by_name=True)

    repo_full_name: Optional[str] = Field(None, alias="repoFullName")


class RepositoryOut(BaseModel):
    id: int
    github_repo_id: int
    full_name: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars_count: int
    forks_count: int
    watchers_count: int
    open_issues_count: int
    size_kb: int
    default_branch: Optional[str] = None
    homepage_url: Optional[str] = None
    topics: List[str] = []
    license_name: Optional[str] = None
    created_at_github: Optional[datetime] = None
    last_commit_at: Optional[datetime] = None
    last_push_at: Optional[datetime] = None
    abandonment_status: str
    maintenance_score: Optional[int] = None
    is_analyzed: bool
    last_analyzed_at: Optional[datetime] = None
    views_count: int
    interest_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RepositoryEnvelope(BaseModel):
    repository: RepositoryOut


class RepositoryList(BaseModel):
    repositories: List[RepositoryOut]


class DiscoveredRepository(BaseModel):
    """A GitHub search hit, scored but not stored"""
    github_repo_id: int
    full_name: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars_count: int
    forks_count: int
    open_issues_count: int
    last_push_at: Optional[datetime] = None
    abandonment_status: str
    maintenance_score: int


class DiscoverOut(BaseModel):
    repositories: List[DiscoveredRepository]
    total: int
    page: int


class SeedOut(BaseModel):
    message: str
    repos: List[str]
    skipped: List[str]
    errors: List[str]
