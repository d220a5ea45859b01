"""
GitHub REST client for repository metadata.

Wraps the few GitHub endpoints the catalog needs: repository details, the
latest commit date and a search for stale repositories. Every call uses the
configured timeout and returns a tagged result instead of raising.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from app.core.config import GitHubConfig
from app.core.result import Err, ErrorKind, Ok, Result
from app.logging import get_logger

logger = get_logger(__name__)


class GitHubRepoData(BaseModel):
    """Repository attributes as stored in the catalog"""
    github_repo_id: int
    full_name: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0
    size_kb: int = 0
    default_branch: str = "main"
    homepage_url: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    license_name: Optional[str] = None
    created_at_github: Optional[datetime] = None
    last_push_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GitHubRepoData":
        license_info = data.get("license") or {}
        return cls(
            github_repo_id=data["id"],
            full_name=data["full_name"],
            name=data["name"],
            description=data.get("description"),
            language=data.get("language"),
            stars_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            watchers_count=data.get("watchers_count") or 0,
            open_issues_count=data.get("open_issues_count") or 0,
            size_kb=data.get("size") or 0,
            default_branch=data.get("default_branch") or "main",
            homepage_url=data.get("homepage") or None,
            topics=data.get("topics") or [],
            license_name=license_info.get("name"),
            created_at_github=data.get("created_at"),
            last_push_at=data.get("pushed_at"),
        )


class GitHubSearchPage(BaseModel):
    repositories: List[GitHubRepoData]
    total: int


def parse_repo_full_name(full_name: str):
    """Split ``owner/repo`` into its two parts."""
    owner, _, repo = full_name.partition("/")
    return owner, repo


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class GitHubClient:
    """
    Async GitHub REST client.

    Args:
        config: Token, timeout, base URL and user agent
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(self, config: GitHubConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.config.user_agent,
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=self._headers(),
            timeout=self.config.timeout,
            transport=self.transport,
        )

    async def get_repository(self, full_name: str) -> Result[GitHubRepoData]:
        """
        Fetch repository attributes.

        Returns:
            Ok(GitHubRepoData), or Err with NOT_FOUND_UPSTREAM (404),
            UPSTREAM_TIMEOUT or UPSTREAM_FAILURE
        """
        owner, repo = parse_repo_full_name(full_name)
        try:
            async with self._client() as client:
                response = await client.get(f"/repos/{owner}/{repo}")
        except httpx.TimeoutException:
            logger.warning("GitHub repository lookup timed out", full_name=full_name)
            return Err(ErrorKind.UPSTREAM_TIMEOUT, "GitHub did not respond in time")
        except httpx.HTTPError as e:
            logger.warning("GitHub repository lookup failed", full_name=full_name, error=str(e))
            return Err(ErrorKind.UPSTREAM_FAILURE, "Failed to reach GitHub")

        if response.status_code == 404:
            return Err(ErrorKind.NOT_FOUND_UPSTREAM, "Repository not found on GitHub")
        if response.status_code != 200:
            logger.warning(
                "GitHub repository lookup returned an error",
                full_name=full_name,
                status_code=response.status_code,
            )
            return Err(ErrorKind.UPSTREAM_FAILURE, "Failed to fetch repository from GitHub")

        try:
            return Ok(GitHubRepoData.from_api(response.json()))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected GitHub repository payload", full_name=full_name, error=str(e))
            return Err(ErrorKind.UPSTREAM_FAILURE, "Unexpected response from GitHub")

    async def get_latest_commit_date(self, full_name: str) -> Optional[datetime]:
        """
        Author date of the most recent commit on the default branch.

        Failures are logged and reported as ``None``.
        """
        owner, repo = parse_repo_full_name(full_name)
        try:
            async with self._client() as client:
                response = await client.get(f"/repos/{owner}/{repo}/commits", params={"per_page": 1})
            if response.status_code != 200:
                logger.warning(
                    "Latest commit lookup returned an error",
                    full_name=full_name,
                    status_code=response.status_code,
                )
                return None
            commits = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Latest commit lookup failed", full_name=full_name, error=str(e))
            return None

        if not commits:
            return None
        author = ((commits[0] or {}).get("commit") or {}).get("author") or {}
        return _parse_datetime(author.get("date"))

    async def search_abandoned_repos(
        self,
        language: Optional[str] = None,
        min_stars: int = 50,
        page: int = 1,
        now: Optional[datetime] = None,
    ) -> Result[GitHubSearchPage]:
        """
        Search popular repositories with no push in the last year.
        """
        now = now or datetime.now(timezone.utc)
        one_year_ago = (now - timedelta(days=365)).date().isoformat()
        query = f"stars:>={min_stars} pushed:<{one_year_ago}"
        if language:
            query += f" language:{language}"

        params = {"q": query, "sort": "stars", "order": "desc", "per_page": 30, "page": page}
        try:
            async with self._client() as client:
                response = await client.get("/search/repositories", params=params)
        except httpx.TimeoutException:
            return Err(ErrorKind.UPSTREAM_TIMEOUT, "GitHub did not respond in time")
        except httpx.HTTPError as e:
            logger.warning("GitHub search failed", query=query, error=str(e))
            return Err(ErrorKind.UPSTREAM_FAILURE, "Failed to search repositories")

        if response.status_code != 200:
            logger.warning("GitHub search returned an error", query=query, status_code=response.status_code)
            return Err(ErrorKind.UPSTREAM_FAILURE, "Failed to search repositories")

        try:
            payload = response.json()
            items = [GitHubRepoData.from_api(item) for item in payload.get("items", [])]
            return Ok(GitHubSearchPage(repositories=items, total=payload.get("total_count", 0)))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected GitHub search payload", query=query, error=str(e))
            return Err(ErrorKind.UPSTREAM_FAILURE, "Unexpected response from GitHub")
