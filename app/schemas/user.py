"""
Pydantic schemas for User entities.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserSummary(BaseModel):
    """Public identity shown next to squads and members"""
    id: int
    username: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class MemberUser(UserSummary):
    github_id: Optional[int] = None
    bio: Optional[str] = None


class UserOut(BaseModel):
    """Schema for the authenticated user's own record"""
    id: int
    github_id: int
    username: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website_url: Optional[str] = None
    twitter_username: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserEnvelope(BaseModel):
    user: UserOut


class MessageOut(BaseModel):
    message: str
