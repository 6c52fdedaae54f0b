"""GitHub repository import, stat sync and autosync routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.api.deps import get_current_user, get_owned_project
from vibeship.core.errors import ConfigurationFailure
from vibeship.core.github.client import GitHubClient, GitHubClientFactory, get_github_client_factory
from vibeship.core.security.encryption import TokenEncryptionService, get_optional_encryption_service
from vibeship.core.storage.database import get_db
from vibeship.core.timeutils import utcnow
from vibeship.models.database import Project, User
from vibeship.models.schemas.github import AutosyncResponse, GitHubRepoListResponse
from vibeship.models.schemas.project import AutosyncToggle, OwnerProjectResponse
from vibeship.services.github_import import (
    autosync_projects,
    import_repository,
    list_importable_repos,
    sync_project_from_github,
)

router = APIRouter(prefix="/me", tags=["github"])


def get_user_github_client(
    user: User = Depends(get_current_user),
    encryption_service: Optional[TokenEncryptionService] = Depends(get_optional_encryption_service),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> GitHubClient:
    """GitHub client authenticated with the current user's stored token."""
    if not user.github_access_token_encrypted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="GitHub account not connected. Please reconnect your GitHub account.",
        )
    if encryption_service is None:
        raise ConfigurationFailure(
            "TOKEN_ENCRYPTION_KEY is not set",
            public_message="GitHub token storage is not configured",
        )

    try:
        token = encryption_service.decrypt(user.github_access_token_encrypted)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Stored GitHub token is unreadable. Please reconnect your GitHub account.",
        )
    return client_factory(token)


@router.get("/github/repos", response_model=GitHubRepoListResponse)
async def list_github_repos(
    user: User = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_github_client),
    db: AsyncSession = Depends(get_db),
):
    """List the user's GitHub repositories for import."""
    repos = await list_importable_repos(db, user, client)
    return GitHubRepoListResponse(repos=repos)


@router.post(
    "/github/import/{repo_id}",
    response_model=OwnerProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_github_repo(
    repo_id: int,
    user: User = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_github_client),
    db: AsyncSession = Depends(get_db),
):
    """Create a project from one of the user's GitHub repositories."""
    project = await import_repository(db, user, client, repo_id)
    return OwnerProjectResponse.model_validate(project)


@router.post("/projects/{project_id}/github/sync", response_model=OwnerProjectResponse)
async def sync_github_project(
    project: Project = Depends(get_owned_project),
    client: GitHubClient = Depends(get_user_github_client),
    db: AsyncSession = Depends(get_db),
):
    """Refresh a project's GitHub stats from the GitHub API."""
    project = await sync_project_from_github(db, project, client)
    return OwnerProjectResponse.model_validate(project)


@router.put("/projects/{project_id}/github/autosync", response_model=OwnerProjectResponse)
async def toggle_github_autosync(
    toggle: AutosyncToggle,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Opt a project in or out of automatic stat refreshes."""
    if not project.github_repo_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project is not connected to a GitHub repository",
        )

    project.github_autosync = toggle.enabled
    project.updated_at = utcnow()
    await db.commit()
    await db.refresh(project)
    return OwnerProjectResponse.model_validate(project)


@router.post("/github/autosync", response_model=AutosyncResponse)
async def run_github_autosync(
    user: User = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_github_client),
    db: AsyncSession = Depends(get_db),
):
    """
    Refresh stale GitHub stats on the user's autosync-enabled projects.

    Dashboards call this on load; projects synced within the last hour are
    skipped.
    """
    return await autosync_projects(db, user, client)
