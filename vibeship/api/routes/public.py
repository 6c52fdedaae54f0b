"""Public profile, discovery feed and tag catalog routes."""

from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.storage.database import get_db
from vibeship.models.database import Project, ProjectStatus, ProjectTag, User
from vibeship.models.schemas.public import DiscoverResponse, PublicProfile, PublicProject
from vibeship.models.schemas.user import TagCatalogEntry, TagCatalogResponse
from vibeship.services.tags import group_tags, list_catalog

router = APIRouter(tags=["public"])


async def _public_projects(
    db: AsyncSession, rows: list[tuple[Project, User]]
) -> list[PublicProject]:
    """Attach grouped tags to public project rows."""
    project_ids = [project.id for project, _ in rows]
    tags_by_project: dict[str, list[ProjectTag]] = defaultdict(list)
    if project_ids:
        result = await db.execute(
            select(ProjectTag)
            .where(ProjectTag.project_id.in_(project_ids))
            .order_by(ProjectTag.id)
        )
        for tag in result.scalars().all():
            tags_by_project[tag.project_id].append(tag)

    return [
        PublicProject(
            id=project.id,
            name=project.name,
            slug=project.slug,
            description=project.description,
            status=project.status,
            live_url=project.live_url,
            screenshot_url=project.screenshot_url,
            github_repo_url=project.github_repo_url,
            github_stars=project.github_stars,
            github_forks=project.github_forks,
            github_language=project.github_language,
            tags=group_tags(tags_by_project[project.id]),
            owner_username=owner.username,
            last_activity_at=project.last_activity_at,
            created_at=project.created_at,
        )
        for project, owner in rows
    ]


@router.get("/public/{username}", response_model=PublicProfile)
async def get_public_profile(username: str, db: AsyncSession = Depends(get_db)):
    """A user's profile and public projects."""
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {username} not found",
        )

    query = (
        select(Project, User)
        .join(User, Project.user_id == User.id)
        .where(Project.user_id == user.id, Project.is_public.is_(True))
        .order_by(Project.last_activity_at.desc())
    )
    rows = [(project, owner) for project, owner in (await db.execute(query)).all()]

    return PublicProfile(
        username=user.username,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        github_username=user.github_username,
        projects=await _public_projects(db, rows),
    )


@router.get("/discover", response_model=DiscoverResponse)
async def discover_projects(
    limit: int = Query(30, ge=1, le=100),
    status_filter: ProjectStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """Public projects from everyone, most recently active first."""
    query = (
        select(Project, User)
        .join(User, Project.user_id == User.id)
        .where(Project.is_public.is_(True))
    )
    if status_filter is not None:
        query = query.where(Project.status == status_filter)
    query = query.order_by(Project.last_activity_at.desc()).limit(limit)

    rows = [(project, owner) for project, owner in (await db.execute(query)).all()]
    return DiscoverResponse(projects=await _public_projects(db, rows))


@router.get("/tags/catalog", response_model=TagCatalogResponse)
async def get_tag_catalog(db: AsyncSession = Depends(get_db)):
    """Known tag names for autocomplete."""
    entries = await list_catalog(db)
    return TagCatalogResponse(tags=[TagCatalogEntry.model_validate(e) for e in entries])
