from sqlalchemy import BigInteger, Boolean, Column, Integer, String, DateTime, Text, JSON
from datetime import datetime, timezone
from app.db.base import Base


class Repository(Base):
    """
    A GitHub repository imported into the catalog.

    Descriptive fields are copied from the GitHub API at import/refresh time;
    abandonment_status and maintenance_score are computed locally.
    """
    __tablename__ = "repositories"

    id = Column(Integer, primary_key=True, index=True)
    github_repo_id = Column(BigInteger, unique=True, index=True, nullable=False)
    full_name = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    language = Column(String(100), index=True, nullable=True)

    stars_count = Column(Integer, default=0, nullable=False)
    forks_count = Column(Integer, default=0, nullable=False)
    watchers_count = Column(Integer, default=0, nullable=False)
    open_issues_count = Column(Integer, default=0, nullable=False)
    size_kb = Column(Integer, default=0, nullable=False)
    default_branch = Column(String(255), default="main")
    homepage_url = Column(String(500), nullable=True)
    topics = Column(JSON, default=list)
    license_name = Column(String(255), nullable=True)

    # Timestamps reported by GitHub
    created_at_github = Column(DateTime(timezone=True), nullable=True)
    last_commit_at = Column(DateTime(timezone=True), nullable=True)
    last_push_at = Column(DateTime(timezone=True), nullable=True)

    # Computed
    abandonment_status = Column(String(20), default="active", index=True, nullable=False)  # 'active', 'at-risk', 'abandoned', 'reviving'
    maintenance_score = Column(Integer, nullable=True)
    is_analyzed = Column(Boolean, default=False, nullable=False)
    last_analyzed_at = Column(DateTime(timezone=True), nullable=True)

    # Local counters
    views_count = Column(Integer, default=0, nullable=False)
    interest_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Repository(id={self.id}, full_name='{self.full_name}', status='{self.abandonment_status}')>"
