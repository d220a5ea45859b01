from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Boolean, JSON
from datetime import datetime, timezone
from app.db.base import Base


class ActivityFeed(Base):
    """
    Public activity stream entry (repository added, squad created, ...).

    Entries are written best-effort after the primary operation commits.
    """
    __tablename__ = "activity_feed"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    repo_id = Column(Integer, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=True, index=True)
    activity_type = Column(String(50), nullable=False, index=True)  # 'repo_added', 'squad_created', 'squad_joined', 'milestone_reached'
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, default=dict)
    is_public = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
