"""Tests for the GitHub REST client."""

import httpx
import pytest

from vibeship.core.errors import GitHubAuthError, GitHubError, NotFound
from vibeship.core.github.client import GitHubClient

API = "https://api.github.test"

REPO = {
    "id": 99,
    "name": "vibe-tracker",
    "full_name": "shipper/vibe-tracker",
    "description": "Tracks vibes",
    "html_url": "https://github.com/shipper/vibe-tracker",
    "homepage": "https://vibes.example.com",
    "stargazers_count": 12,
    "forks_count": 3,
    "open_issues_count": 1,
    "language": "Python",
    "updated_at": "2026-01-02T03:04:05Z",
    "private": False,
}


def make_client(handler) -> GitHubClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubClient("gho_token", base_url=API, http_client=http_client)


@pytest.mark.unit
class TestGitHubClient:
    """Test cases for GitHubClient."""

    @pytest.mark.asyncio
    async def test_list_user_repos(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=[REPO])

        repos = await make_client(handler).list_user_repos()

        assert [r.full_name for r in repos] == ["shipper/vibe-tracker"]
        assert seen["url"].path == "/user/repos"
        assert seen["url"].params["per_page"] == "100"
        assert seen["url"].params["sort"] == "updated"
        assert seen["auth"] == "Bearer gho_token"

    @pytest.mark.asyncio
    async def test_get_repository(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repositories/99"
            return httpx.Response(200, json=REPO)

        repo = await make_client(handler).get_repository(99)

        assert repo.stargazers_count == 12
        assert repo.language == "Python"

    @pytest.mark.asyncio
    async def test_expired_token(self):
        client = make_client(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))

        with pytest.raises(GitHubAuthError, match="GitHub token expired"):
            await client.list_user_repos()

    @pytest.mark.asyncio
    async def test_missing_repository(self):
        client = make_client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(NotFound):
            await client.get_repository(1)

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = make_client(lambda request: httpx.Response(503))

        with pytest.raises(GitHubError) as exc_info:
            await client.get_repository(1)
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(GitHubError, match="Failed to connect"):
            await make_client(handler).list_user_repos()
