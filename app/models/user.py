from sqlalchemy import BigInteger, Boolean, Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from app.db.base import Base

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    # GitHub numeric id, the stable external identity
    github_id = Column(BigInteger, unique=True, index=True, nullable=False)
    username = Column(String(100), index=True, nullable=False)
    email = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    website_url = Column(String(500), nullable=True)
    twitter_username = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User(id={self.id}, github_id={self.github_id}, username='{self.username}')>"
