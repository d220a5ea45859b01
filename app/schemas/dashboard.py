"""
Pydantic schemas for the /api/users/me aggregates.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class ProjectSummary(BaseModel):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    abandonment_status: str
    maintenance_score: Optional[int] = None
    language: Optional[str] = None
    url: str


class MyProject(ProjectSummary):
    last_activity: Optional[datetime] = None
    stars_count: int
    squad_count: int


class MySquad(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    member_count: int
    role: str
    joined_at: Optional[datetime] = None
    project: ProjectSummary


class MyStats(BaseModel):
    total_projects: int
    total_squads: int
    total_contributions: int
    account_created: Optional[datetime] = None


class MyProjectList(BaseModel):
    projects: List[MyProject]


class MySquadList(BaseModel):
    squads: List[MySquad]


class MyStatsEnvelope(BaseModel):
    stats: MyStats
