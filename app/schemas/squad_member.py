"""
Pydantic schemas for Squad Members.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.user import MemberUser


class SquadJoin(BaseModel):
    """Requested role; privileged or unknown roles are stored as 'member'"""
    role: Optional[str] = Field(None, max_length=20)


class SquadMemberOut(BaseModel):
    id: int
    squad_id: int
    user_id: int
    role: str
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberWithUser(SquadMemberOut):
    user: Optional[MemberUser] = None

    @classmethod
    def from_row(cls, item: dict) -> "MemberWithUser":
        """Build from a ``{"member": SquadMember, "user": {...}}`` row"""
        base = SquadMemberOut.model_validate(item["member"]).model_dump()
        return cls(**base, user=item["user"])


class MemberEnvelope(BaseModel):
    member: SquadMemberOut
    message: str


class MemberList(BaseModel):
    members: List[MemberWithUser]
