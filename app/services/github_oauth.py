"""
GitHub OAuth provider endpoints.

Authorization URL, code-for-token exchange, user profile and email lookup.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from app.core.config import OAuthConfig
from app.logging import get_logger

logger = get_logger(__name__)

GITHUB_AUTH_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_API_URL = "https://api.github.com/user"
GITHUB_USER_EMAILS_API_URL = "https://api.github.com/user/emails"


class GitHubOAuthError(Exception):
    """Provider call failed or returned an unusable payload"""


class GitHubOAuthProvider:
    def __init__(self, config: OAuthConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self.transport)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "scope": self.config.scope,
            "state": state,
        }
        return f"{GITHUB_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange the authorization code for an access token.

        Raises:
            GitHubOAuthError: On transport failure, provider error or missing token
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    GITHUB_TOKEN_URL,
                    headers={"Accept": "application/json"},
                    json={
                        "client_id": self.config.client_id,
                        "client_secret": self.config.client_secret,
                        "code": code,
                    },
                )
            token_data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GitHubOAuthError(f"token exchange failed: {e}") from e

        if not isinstance(token_data, dict) or token_data.get("error") or not token_data.get("access_token"):
            error = token_data.get("error") if isinstance(token_data, dict) else None
            raise GitHubOAuthError(f"token exchange rejected: {error or 'no access_token'}")
        return token_data["access_token"]

    async def fetch_user(self, access_token: str) -> Dict[str, Any]:
        """
        Fetch the authenticated user's profile.

        Raises:
            GitHubOAuthError: On transport failure or a profile without ``id``
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    GITHUB_USER_API_URL,
                    headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
                )
            profile = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GitHubOAuthError(f"user fetch failed: {e}") from e

        if not isinstance(profile, dict) or not profile.get("id"):
            raise GitHubOAuthError("user profile has no id")
        return profile

    async def fetch_primary_email(self, access_token: str) -> Optional[str]:
        """Primary address from ``/user/emails``; ``None`` when unavailable."""
        try:
            async with self._client() as client:
                response = await client.get(
                    GITHUB_USER_EMAILS_API_URL,
                    headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
                )
            emails: List[Dict[str, Any]] = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Email lookup failed", error=str(e))
            return None

        if not isinstance(emails, list):
            return None
        primary = next((e for e in emails if isinstance(e, dict) and e.get("primary")), None)
        return primary.get("email") if primary else None
