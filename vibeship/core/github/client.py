"""Async client for the parts of the GitHub REST API the app uses."""

import logging
from typing import Any, Callable

import httpx

from vibeship.core.config import settings
from vibeship.core.errors import GitHubAuthError, GitHubError, NotFound
from vibeship.models.schemas.github import GitHubRepo

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
DEFAULT_TIMEOUT = 15.0


class GitHubClient:
    """Fetch repository metadata on behalf of one user."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            token: The user's GitHub OAuth access token
            base_url: API root, defaults to the configured GitHub API URL
            http_client: Optional shared httpx client (used by tests)
        """
        self.token = token
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self._http_client = http_client

    async def list_user_repos(self) -> list[GitHubRepo]:
        """Repositories of the authenticated user, most recently updated first."""
        data = await self._get("/user/repos", params={"per_page": 100, "sort": "updated"})
        return [GitHubRepo.model_validate(repo) for repo in data]

    async def get_repository(self, repo_id: int) -> GitHubRepo:
        """Repository metadata by numeric ID."""
        data = await self._get(f"/repositories/{repo_id}")
        return GitHubRepo.model_validate(data)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": GITHUB_ACCEPT,
        }
        url = f"{self.base_url}{path}"

        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, headers=headers, params=params)
            else:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
                    response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.warning("GitHub request to %s failed: %s", path, e)
            raise GitHubError("Failed to connect to GitHub. Please try again.")

        if response.status_code == 401:
            raise GitHubAuthError("GitHub token expired. Please reconnect your GitHub account.")
        if response.status_code == 404:
            raise NotFound("Repository not found on GitHub")
        if response.is_error:
            logger.warning("GitHub returned %s for %s", response.status_code, path)
            raise GitHubError(f"GitHub API error ({response.status_code})")

        return response.json()


GitHubClientFactory = Callable[[str], GitHubClient]


def get_github_client_factory() -> GitHubClientFactory:
    """Dependency returning a callable that builds a client for a token."""
    return GitHubClient
