"""
User factory for test data generation.
"""

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserFactory(factory.Factory):
    """
    Factory for User model.

    github_id is unique per instance, as GitHub ids are.
    """

    class Meta:
        model = User

    github_id = factory.Sequence(lambda n: 1000 + n)
    username = factory.Sequence(lambda n: f"dev{n}")
    email = factory.Faker("email")
    avatar_url = factory.LazyAttribute(lambda o: f"https://avatars.githubusercontent.com/u/{o.github_id}")
    bio = factory.Faker("sentence")
    location = factory.Faker("city")
    website_url = None
    twitter_username = None
    is_active = True

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> User:
        """
        Create user in database asynchronously.

        Args:
            db_session: AsyncSession instance
            **kwargs: Override factory attributes

        Returns:
            User instance (flushed, not committed)
        """
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()  # Get ID without committing transaction
        return instance


def session_headers(user: User) -> dict:
    """Cookie header carrying a fresh session for ``user``."""
    from app.api.dependencies import get_session_manager

    manager = get_session_manager()
    token = manager.issue({
        "user_id": user.id,
        "github_id": user.github_id,
        "username": user.username,
        "email": user.email,
        "avatar_url": user.avatar_url,
    })
    return {"Cookie": f"{manager.cookie_name}={token}"}
