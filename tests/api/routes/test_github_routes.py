"""Tests for GitHub import, sync and autosync routes."""

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.errors import GitHubAuthError, NotFound
from vibeship.core.timeutils import utcnow
from vibeship.models.database import ActivityLogEntry, Project
from vibeship.models.schemas.github import GitHubRepo

REPO = GitHubRepo(
    id=9001,
    name="Side Quest",
    full_name="shipper/side-quest",
    description="A weekend project",
    html_url="https://github.com/shipper/side-quest",
    homepage="https://sidequest.example.com",
    stargazers_count=21,
    forks_count=3,
    open_issues_count=2,
    language="Go",
)

LONG_AGO = datetime(2020, 1, 1)


class FakeGitHubClient:
    """Records the token it was built with and serves canned repositories."""

    def __init__(self, token, repos=(REPO,), expired=False):
        self.token = token
        self.repos = {repo.id: repo for repo in repos}
        self.expired = expired

    async def list_user_repos(self):
        if self.expired:
            raise GitHubAuthError("GitHub token expired. Please reconnect your GitHub account.")
        return list(self.repos.values())

    async def get_repository(self, repo_id):
        if repo_id not in self.repos:
            raise NotFound("Repository not found on GitHub")
        return self.repos[repo_id]


@pytest.fixture
def built_clients():
    return []


@pytest.fixture
def github_client_factory(built_clients):
    def factory(token):
        client = FakeGitHubClient(token, expired=token == "gho_expired")
        built_clients.append(client)
        return client

    return factory


@pytest.fixture
async def connected_user(db_session, sample_user, encryption_service):
    sample_user.github_access_token_encrypted = encryption_service.encrypt("gho_valid")
    await db_session.commit()
    return sample_user


@pytest.mark.api
class TestGitHubRoutes:
    """Test cases for /api/me/github routes."""

    @pytest.mark.asyncio
    async def test_list_repos(self, client, connected_user, owner_headers, built_clients):
        response = await client.get("/api/me/github/repos", headers=owner_headers)

        assert response.status_code == 200
        repos = response.json()["repos"]
        assert repos[0]["full_name"] == "shipper/side-quest"
        assert repos[0]["is_imported"] is False
        assert built_clients[0].token == "gho_valid"

    @pytest.mark.asyncio
    async def test_not_connected(self, client, sample_user, owner_headers):
        response = await client.get("/api/me/github/repos", headers=owner_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_expired_token(self, client, db_session, sample_user, owner_headers, encryption_service):
        sample_user.github_access_token_encrypted = encryption_service.encrypt("gho_expired")
        await db_session.commit()

        response = await client.get("/api/me/github/repos", headers=owner_headers)

        assert response.status_code == 401
        assert response.json() == {"error": "GitHub token expired. Please reconnect your GitHub account."}

    @pytest.mark.asyncio
    async def test_import_repo(self, client, db_session, connected_user, owner_headers):
        response = await client.post("/api/me/github/import/9001", headers=owner_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Side Quest"
        assert data["slug"] == "side-quest"
        assert data["github_repo_id"] == 9001
        assert data["github_stars"] == 21
        assert data["live_url"] == "https://sidequest.example.com"

        listing = await client.get("/api/me/github/repos", headers=owner_headers)
        assert listing.json()["repos"][0]["is_imported"] is True

    @pytest.mark.asyncio
    async def test_import_twice(self, client, connected_user, owner_headers):
        await client.post("/api/me/github/import/9001", headers=owner_headers)
        response = await client.post("/api/me/github/import/9001", headers=owner_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "This repository has already been imported."

    @pytest.mark.asyncio
    async def test_import_unknown_repo(self, client, db_session, connected_user, owner_headers):
        response = await client.post("/api/me/github/import/1", headers=owner_headers)

        assert response.status_code == 404
        assert (await db_session.execute(select(Project))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_sync_project(self, client, connected_user, owner_headers, make_project):
        project = await make_project(github_repo_id=9001)

        response = await client.post(
            f"/api/me/projects/{project.id}/github/sync", headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["github_stars"] == 21
        assert response.json()["github_language"] == "Go"

    @pytest.mark.asyncio
    async def test_sync_moves_last_activity_when_log_write_fails(
        self, client, db_session, connected_user, owner_headers, make_project, monkeypatch
    ):
        project = await make_project(github_repo_id=9001, last_activity_at=LONG_AGO)
        original_add = AsyncSession.add

        def add(self, instance, *args, **kwargs):
            if isinstance(instance, ActivityLogEntry):
                raise RuntimeError("activity log unavailable")
            return original_add(self, instance, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "add", add)

        response = await client.post(
            f"/api/me/projects/{project.id}/github/sync", headers=owner_headers
        )

        assert response.status_code == 200
        await db_session.refresh(project)
        assert project.github_stars == 21
        assert project.last_activity_at > LONG_AGO


@pytest.mark.api
class TestGitHubAutosync:
    """Test cases for the autosync toggle and batch refresh."""

    @pytest.mark.asyncio
    async def test_enable_autosync(self, client, db_session, owner_headers, make_project):
        project = await make_project(github_repo_id=9001)

        response = await client.put(
            f"/api/me/projects/{project.id}/github/autosync",
            headers=owner_headers,
            json={"enabled": True},
        )

        assert response.status_code == 200
        assert response.json()["github_autosync"] is True
        await db_session.refresh(project)
        assert project.github_autosync is True

    @pytest.mark.asyncio
    async def test_toggle_requires_linked_repository(self, client, owner_headers, make_project):
        project = await make_project()

        response = await client.put(
            f"/api/me/projects/{project.id}/github/autosync",
            headers=owner_headers,
            json={"enabled": True},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_refreshes_only_stale_enabled_projects(
        self, client, db_session, connected_user, owner_headers, make_project
    ):
        stale = await make_project(
            github_repo_id=9001, github_autosync=True, github_synced_at=LONG_AGO, last_activity_at=LONG_AGO
        )
        never_synced = await make_project(github_repo_id=9001, github_autosync=True)
        fresh = await make_project(github_repo_id=9001, github_autosync=True, github_synced_at=utcnow())
        opted_out = await make_project(github_repo_id=9001, github_synced_at=LONG_AGO)

        response = await client.post("/api/me/github/autosync", headers=owner_headers)

        assert response.status_code == 200
        assert sorted(response.json()["synced"]) == sorted([stale.id, never_synced.id])
        assert response.json()["failed"] == []

        for project in (stale, never_synced, fresh, opted_out):
            await db_session.refresh(project)
        assert stale.github_stars == never_synced.github_stars == 21
        assert fresh.github_stars == opted_out.github_stars == 0
        # Background refreshes are not activity
        assert stale.last_activity_at == LONG_AGO
        assert (await db_session.execute(select(ActivityLogEntry))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_missing_repository_fails_only_its_project(
        self, client, db_session, connected_user, owner_headers, make_project
    ):
        gone = await make_project(github_repo_id=1, github_autosync=True)
        kept = await make_project(github_repo_id=9001, github_autosync=True)

        response = await client.post("/api/me/github/autosync", headers=owner_headers)

        assert response.status_code == 200
        assert response.json() == {"synced": [kept.id], "failed": [gone.id]}
        await db_session.refresh(gone)
        assert gone.github_synced_at is None

    @pytest.mark.asyncio
    async def test_requires_connected_account(self, client, sample_user, owner_headers):
        response = await client.post("/api/me/github/autosync", headers=owner_headers)
        assert response.status_code == 400
