"""
GitHub OAuth login flow.

    Unauthenticated --start()--> PendingCallback --complete()--> Authenticated

``start`` produces the CSRF state stored in the ``oauth_state`` cookie;
``complete`` checks it against the callback's ``state`` before any network
or database work, then exchanges the code, loads the profile, upserts the
User and returns the identity for the new session.

Every failure maps to one stable error code that is safe to place in the
login redirect URL.
"""

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import OAuthConfig
from app.crud.crud_user import profile_from_github, upsert_user_by_external_id
from app.services.github_oauth import GitHubOAuthError, GitHubOAuthProvider
from app.logging import get_logger

logger = get_logger(__name__)


class OAuthErrorCode(str, Enum):
    INVALID_STATE = "invalid_state"
    OAUTH_FAILED = "oauth_failed"
    USER_FETCH_FAILED = "user_fetch_failed"
    DB_ERROR = "db_error"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class OAuthIdentity:
    user_id: int
    github_id: int
    username: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    def as_session_identity(self) -> dict:
        return {
            "user_id": self.user_id,
            "github_id": self.github_id,
            "username": self.username,
            "email": self.email,
            "avatar_url": self.avatar_url,
        }


@dataclass(frozen=True)
class OAuthFailure:
    code: OAuthErrorCode


OAuthOutcome = Union[OAuthIdentity, OAuthFailure]


def states_match(state: Optional[str], stored_state: Optional[str]) -> bool:
    """Both present and byte-for-byte equal (constant-time)."""
    if not state or not stored_state:
        return False
    return secrets.compare_digest(state.encode("utf-8"), stored_state.encode("utf-8"))


class OAuthFlow:
    def __init__(self, config: OAuthConfig, provider: Optional[GitHubOAuthProvider] = None):
        self.config = config
        self.provider = provider or GitHubOAuthProvider(config)

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def start(self):
        """
        Begin the handshake.

        Returns:
            (authorization_url, state) tuple; the caller stores ``state`` in
            the short-lived CSRF cookie
        """
        state = secrets.token_urlsafe(32)
        return self.provider.authorization_url(state), state

    def login_error_url(self, code: OAuthErrorCode) -> str:
        return f"{self.config.app_url}/auth/login?error={code.value}"

    @property
    def success_url(self) -> str:
        return f"{self.config.app_url}/dashboard"

    async def complete(
        self,
        db: AsyncSession,
        code: Optional[str],
        state: Optional[str],
        stored_state: Optional[str],
    ) -> OAuthOutcome:
        """
        Finish the handshake for a callback request.

        Returns:
            OAuthIdentity on success, OAuthFailure with a stable code otherwise
        """
        if not code or not states_match(state, stored_state):
            logger.warning("OAuth callback rejected: state mismatch")
            return OAuthFailure(OAuthErrorCode.INVALID_STATE)

        try:
            access_token = await self.provider.exchange_code(code)
        except GitHubOAuthError as e:
            logger.warning("OAuth code exchange failed", error=str(e))
            return OAuthFailure(OAuthErrorCode.OAUTH_FAILED)

        try:
            github_user = await self.provider.fetch_user(access_token)
        except GitHubOAuthError as e:
            logger.warning("OAuth user fetch failed", error=str(e))
            return OAuthFailure(OAuthErrorCode.USER_FETCH_FAILED)

        email = github_user.get("email")
        if not email:
            email = await self.provider.fetch_primary_email(access_token)

        github_id = int(github_user["id"])
        try:
            user = await upsert_user_by_external_id(db, github_id, profile_from_github(github_user, email))
        except SQLAlchemyError:
            await db.rollback()
            logger.error("Failed to upsert user from GitHub profile", github_id=github_id)
            return OAuthFailure(OAuthErrorCode.DB_ERROR)

        logger.info("User authenticated with GitHub", user_id=user.id, github_id=github_id)
        return OAuthIdentity(
            user_id=user.id,
            github_id=github_id,
            username=user.username,
            email=user.email,
            avatar_url=user.avatar_url,
        )
