"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, RepositoryFactory

    # Create user
    user = await UserFactory.create_async(db_session, username="octocat")

    # Create squad with its creator membership
    squad = await SquadFactory.create_with_creator_async(
        db_session, repo_id=repo.id, created_by=user.id
    )
"""

from tests.factories.user import UserFactory
from tests.factories.repository import RepositoryFactory
from tests.factories.squad import SquadFactory
from tests.factories.squad_member import SquadMemberFactory

__all__ = [
    "UserFactory",
    "RepositoryFactory",
    "SquadFactory",
    "SquadMemberFactory",
]
