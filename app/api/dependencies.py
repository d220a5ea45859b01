from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import SessionAsync
from app.models.user import User
from app.core.config import settings
from app.core.session import SessionData, SessionManager
from app.services.github import GitHubClient
from app.services.oauth import OAuthFlow
from app.services.repository_import import RepositoryImportService
from app.services.squads import SquadService

_session_manager = SessionManager(settings.session_config())


async def get_db():
    async with SessionAsync() as session:
        yield session


def get_session_manager() -> SessionManager:
    return _session_manager


def get_optional_session(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> Optional[SessionData]:
    """Session of the caller, or None for anonymous requests."""
    return manager.read(request)


def require_session(
    session: Optional[SessionData] = Depends(get_optional_session),
) -> SessionData:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return session


async def get_current_user(
    session: SessionData = Depends(require_session),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Load the User behind the session cookie.

    Raises:
        HTTPException 401: No valid session
        HTTPException 404: Session points at a user that no longer exists
    """
    user = await db.get(User, session.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


# ==================== Service Dependencies ====================

def get_github_client() -> GitHubClient:
    return GitHubClient(settings.github_config())


def get_import_service(
    github: GitHubClient = Depends(get_github_client),
) -> RepositoryImportService:
    return RepositoryImportService(github)


def get_oauth_flow() -> OAuthFlow:
    return OAuthFlow(settings.oauth_config())


def get_squad_service() -> SquadService:
    return SquadService()
