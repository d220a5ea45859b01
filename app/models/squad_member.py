from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base


class SquadMember(Base):
    """
    Membership of a User in a Squad.

    Attributes:
        role: 'creator' (exactly one per squad), 'moderator', 'member' or a
            contributor specialty such as 'frontend' or 'docs'
    """
    __tablename__ = "squad_members"

    id = Column(Integer, primary_key=True, index=True)
    squad_id = Column(Integer, ForeignKey("squads.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    squad = relationship("Squad", back_populates="members")

    # Constraints
    __table_args__ = (
        UniqueConstraint("squad_id", "user_id", name="uq_squad_member"),
    )

    def __repr__(self):
        return f"<SquadMember(squad_id={self.squad_id}, user_id={self.user_id}, role='{self.role}')>"
