"""
Repository factory for test data generation.
"""

from datetime import datetime, timedelta, timezone

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.repository import Repository


class RepositoryFactory(factory.Factory):
    """
    Factory for Repository model.

    Defaults describe an analyzed, abandoned JavaScript project.
    """

    class Meta:
        model = Repository

    github_repo_id = factory.Sequence(lambda n: 50000 + n)
    name = factory.Sequence(lambda n: f"project-{n}")
    full_name = factory.LazyAttribute(lambda o: f"legacy-org/{o.name}")
    description = factory.Faker("catch_phrase")
    language = "JavaScript"
    stars_count = 1200
    forks_count = 150
    watchers_count = 1200
    open_issues_count = 40
    size_kb = 2048
    default_branch = "main"
    homepage_url = None
    topics = factory.LazyFunction(lambda: ["legacy"])
    license_name = "MIT License"
    last_commit_at = factory.LazyFunction(lambda: datetime.now(timezone.utc) - timedelta(days=500))
    last_push_at = factory.LazyFunction(lambda: datetime.now(timezone.utc) - timedelta(days=500))
    abandonment_status = "abandoned"
    maintenance_score = 46
    is_analyzed = True
    views_count = 0
    interest_count = 0

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> Repository:
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance
