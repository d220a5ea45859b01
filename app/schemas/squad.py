"""
Pydantic schemas for Squads.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.schemas.squad_member import MemberWithUser
from app.schemas.user import UserSummary


class SquadCreate(BaseModel):
    """Schema for creating a squad; name emptiness is checked by the service"""
    repo_id: int = Field(..., gt=0)
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class SquadUpdate(BaseModel):
    """Schema for updating a squad (creator only)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "is_active", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Squad name cannot be empty")
        return value


class SquadOut(BaseModel):
    id: int
    repo_id: int
    name: str
    description: Optional[str] = None
    created_by: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SquadWithMembership(SquadOut):
    """Squad annotated for the viewer"""
    creator: Optional[UserSummary] = None
    member_count: int = 0
    is_user_member: bool = False
    user_role: Optional[str] = None

    @classmethod
    def from_listing(cls, item: dict) -> "SquadWithMembership":
        base = SquadOut.model_validate(item["squad"]).model_dump()
        return cls(
            **base,
            creator=item["creator"],
            member_count=item["member_count"],
            is_user_member=item["is_user_member"],
            user_role=item["user_role"],
        )


class SquadDetail(SquadWithMembership):
    members: List[MemberWithUser] = []

    @classmethod
    def from_detail(cls, item: dict) -> "SquadDetail":
        listing = SquadWithMembership.from_listing(item).model_dump()
        return cls(**listing, members=[MemberWithUser.from_row(row) for row in item["members"]])


class SquadEnvelope(BaseModel):
    squad: SquadOut
    message: Optional[str] = None


class SquadDetailEnvelope(BaseModel):
    squad: SquadDetail


class SquadList(BaseModel):
    squads: List[SquadWithMembership]
