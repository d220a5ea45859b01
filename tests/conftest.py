"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- Database session on a fresh in-memory SQLite database per test
- GitHub stub (httpx.MockTransport) for the REST and OAuth clients
- HTTP client with dependency overrides
- Base data fixtures (user, repository, squad, auth_headers)
"""

import os
import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_URL"] = "http://localhost:3000"
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"
os.environ["SENTRY_DSN"] = ""
os.environ["ACCESS_LOG_ENABLED"] = "false"

from app.main import app
from app.api.dependencies import get_db, get_github_client, get_oauth_flow
from app.core.config import GitHubConfig, settings
from app.db.base import Base
from app.services.github import GitHubClient
from app.services.github_oauth import GitHubOAuthProvider
from app.services.oauth import OAuthFlow
from tests.factories.github import GitHubStub
from tests.factories.user import session_headers

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine():
    """
    In-memory SQLite engine, one per test.

    StaticPool keeps the single connection alive so every session sees the
    same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False  # Set to True for SQL debugging
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Session shared by the test body and the application under test.

    Services commit, so isolation comes from the per-test database.
    """
    session_factory = sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    session = session_factory()

    yield session

    await session.close()


# ==================== GitHub ====================

@pytest.fixture
def github_stub() -> GitHubStub:
    """Route table for every outbound GitHub call made during the test."""
    return GitHubStub()


@pytest.fixture
def github_client(github_stub: GitHubStub) -> GitHubClient:
    return GitHubClient(GitHubConfig(timeout=1.0), transport=github_stub.transport())


@pytest.fixture
def oauth_flow(github_stub: GitHubStub) -> OAuthFlow:
    config = settings.oauth_config()
    return OAuthFlow(config, provider=GitHubOAuthProvider(config, transport=github_stub.transport()))


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    github_client: GitHubClient,
    oauth_flow: OAuthFlow,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db and the GitHub dependencies to use test fixtures.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_github_client] = lambda: github_client
    app.dependency_overrides[get_oauth_flow] = lambda: oauth_flow

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clear overrides after test
    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, username="other-dev")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(user):
    """Session cookie header for ``user``."""
    return session_headers(user)


@pytest.fixture
async def other_auth_headers(other_user):
    return session_headers(other_user)


@pytest.fixture
async def repository(db_session: AsyncSession):
    from tests.factories.repository import RepositoryFactory
    repo = await RepositoryFactory.create_async(db_session)
    await db_session.commit()
    await db_session.refresh(repo)
    return repo


@pytest.fixture
async def squad(db_session: AsyncSession, user, repository):
    """
    Squad on ``repository`` created by ``user``, with its creator membership.
    """
    from tests.factories.squad import SquadFactory
    squad = await SquadFactory.create_with_creator_async(
        db_session,
        repo_id=repository.id,
        created_by=user.id,
    )
    await db_session.commit()
    await db_session.refresh(squad)
    return squad
