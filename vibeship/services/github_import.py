"""Importing GitHub repositories as projects and refreshing their stats."""

import asyncio
import logging
import re
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.errors import NotFound, UpstreamFailure
from vibeship.core.github.client import GitHubClient
from vibeship.core.timeutils import utcnow
from vibeship.models.database import ActivityActor, Project, ProjectStatus, TagType, User
from vibeship.models.schemas.github import AutosyncResponse, GitHubRepoSummary
from vibeship.models.schemas.project import TagInput
from vibeship.services.activity_logger import log_activity
from vibeship.services.stat_sync import RepositoryStats, sync_github_stats
from vibeship.services.tags import add_to_catalog, replace_project_tags

logger = logging.getLogger(__name__)

# Autosync leaves stats younger than this alone
AUTOSYNC_STALE_AFTER = timedelta(hours=1)


def slugify(text: str) -> str:
    """Lowercase, drop punctuation, join words with single hyphens."""
    slug = text.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip() or "project"


async def unique_slug(session: AsyncSession, user_id: str, name: str) -> str:
    """First free slug among ``slug``, ``slug-1``, ``slug-2``, ... for a user."""
    base = slugify(name)
    result = await session.execute(
        select(Project.slug).where(Project.user_id == user_id, Project.slug.like(f"{base}%"))
    )
    taken = set(result.scalars().all())

    if base not in taken:
        return base
    counter = 1
    while f"{base}-{counter}" in taken:
        counter += 1
    return f"{base}-{counter}"


async def list_importable_repos(
    session: AsyncSession, user: User, client: GitHubClient
) -> list[GitHubRepoSummary]:
    """The user's repositories, flagged when already imported."""
    repos = await client.list_user_repos()

    result = await session.execute(
        select(Project.github_repo_id).where(
            Project.user_id == user.id, Project.github_repo_id.is_not(None)
        )
    )
    imported_ids = set(result.scalars().all())

    return [
        GitHubRepoSummary(
            id=repo.id,
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            url=repo.html_url,
            homepage=repo.homepage,
            stars=repo.stargazers_count,
            language=repo.language,
            updated_at=repo.updated_at,
            is_private=repo.private,
            is_imported=repo.id in imported_ids,
        )
        for repo in repos
    ]


async def import_repository(
    session: AsyncSession, user: User, client: GitHubClient, repo_id: int
) -> Project:
    """
    Create a project from a GitHub repository.

    Args:
        session: Database session
        user: Importing user
        client: GitHub client authenticated as the user
        repo_id: GitHub repository ID

    Returns:
        The new project

    Raises:
        HTTPException: 409 if the repository was already imported
    """
    existing = await session.execute(
        select(Project.id).where(Project.user_id == user.id, Project.github_repo_id == repo_id)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This repository has already been imported.",
        )

    repo = await client.get_repository(repo_id)
    now = utcnow()

    project = Project(
        user_id=user.id,
        name=repo.name,
        slug=await unique_slug(session, user.id, repo.name),
        description=repo.description or None,
        status=ProjectStatus.active,
        is_public=not repo.private,
        github_repo_url=repo.html_url,
        github_repo_id=repo.id,
        github_stars=repo.stargazers_count,
        github_forks=repo.forks_count,
        github_open_issues=repo.open_issues_count,
        github_language=repo.language,
        github_synced_at=now,
        live_url=repo.homepage or None,
        created_at=now,
        updated_at=now,
        last_activity_at=now,
    )
    session.add(project)
    await session.flush()

    # The primary language becomes a framework tag
    if repo.language:
        language_tag = [TagInput(tag_type=TagType.framework, tag_value=repo.language)]
        await replace_project_tags(session, project.id, language_tag)
        await add_to_catalog(session, language_tag)

    await session.commit()

    await log_activity(
        session,
        project.id,
        "project_created",
        {"source": "github_import", "repo": repo.full_name},
        actor=ActivityActor.user,
        at=now,
    )
    await session.refresh(project)
    logger.info("Imported GitHub repository %s as project %s", repo.full_name, project.id)
    return project


async def sync_project_from_github(
    session: AsyncSession, project: Project, client: GitHubClient
) -> Project:
    """Refresh a project's cached stats from the GitHub API."""
    if not project.github_repo_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project is not connected to a GitHub repository",
        )

    repo = await client.get_repository(project.github_repo_id)
    stats = RepositoryStats.from_repository(repo)
    now = utcnow()
    await sync_github_stats(session, project.id, stats, synced_at=now, touched_at=now)

    await log_activity(
        session,
        project.id,
        "github_synced",
        {"stars": stats.stars, "forks": stats.forks, "open_issues": stats.open_issues},
        actor=ActivityActor.user,
        at=now,
    )
    await session.refresh(project)
    return project


async def autosync_projects(
    session: AsyncSession,
    user: User,
    client: GitHubClient,
    now: datetime | None = None,
) -> AutosyncResponse:
    """
    Refresh stale stats on every autosync-enabled project of a user.

    Only the cached counters move. Nothing is logged and
    ``last_activity_at`` stays put, so a background refresh never reorders
    the dashboard. A repository GitHub cannot serve fails that project
    alone; an expired token fails the whole run.
    """
    now = now or utcnow()
    result = await session.execute(
        select(Project).where(
            Project.user_id == user.id,
            Project.github_autosync.is_(True),
            Project.github_repo_id.is_not(None),
            or_(
                Project.github_synced_at.is_(None),
                Project.github_synced_at < now - AUTOSYNC_STALE_AFTER,
            ),
        )
    )
    projects = list(result.scalars().all())

    repos = await asyncio.gather(
        *(client.get_repository(project.github_repo_id) for project in projects),
        return_exceptions=True,
    )

    synced, failed = [], []
    for project, repo in zip(projects, repos):
        if isinstance(repo, (NotFound, UpstreamFailure)):
            logger.warning("Autosync failed for project %s: %s", project.id, repo)
            failed.append(project.id)
            continue
        if isinstance(repo, BaseException):
            raise repo
        await sync_github_stats(session, project.id, RepositoryStats.from_repository(repo), synced_at=now)
        synced.append(project.id)

    return AutosyncResponse(synced=synced, failed=failed)
