"""Owner-facing project management routes.

These sit behind the external auth provider, which forwards the signed-in
user's ID in the X-User-Id header.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.api.deps import get_current_user, get_owned_project
from vibeship.core.config import Settings, get_settings
from vibeship.core.errors import ConfigurationFailure
from vibeship.core.security.api_keys import generate_api_key, mask_api_key
from vibeship.core.security.encryption import TokenEncryptionService, get_optional_encryption_service
from vibeship.core.storage.database import get_db
from vibeship.core.storage.screenshot_storage import ScreenshotStorage, get_screenshot_storage
from vibeship.core.timeutils import utcnow
from vibeship.models.database import ActivityActor, Project, User
from vibeship.models.schemas.activity import (
    ActivityFeedItem,
    ActivityFeedResponse,
    ActivityListResponse,
    ActivityLogResponse,
)
from vibeship.models.schemas.project import (
    AiPromptResponse,
    ApiKeyResponse,
    GroupedTags,
    OwnerProjectResponse,
    StatusUpdate,
    TagsUpdate,
    VisibilityUpdate,
    WebhookToggle,
    WebhookToggleResponse,
)
from vibeship.models.schemas.user import ProfileUpdate, UserResponse
from vibeship.services.activity_logger import list_owner_activity, list_project_activity, log_activity
from vibeship.services.context_formatter import (
    generate_ai_context_prompt,
    generate_bootstrap_prompt,
    project_endpoint,
)
from vibeship.services.tags import add_to_catalog, get_project_tags, group_tags, replace_project_tags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/me", tags=["owner"])

PROFILE_FIELDS = ("display_name", "avatar_url", "bio", "github_username")


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        github_username=user.github_username,
        github_connected=user.github_access_token_encrypted is not None,
        created_at=user.created_at,
    )


# Profile endpoints
@router.put("/profile", response_model=UserResponse)
async def upsert_profile(
    profile: ProfileUpdate,
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
    encryption_service: Optional[TokenEncryptionService] = Depends(get_optional_encryption_service),
):
    """
    Create or update the local user record after sign-in.

    Fields left out of the payload keep their stored values. The GitHub
    token is stored encrypted; sending null clears it.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    taken = await db.execute(
        select(User.id).where(User.username == profile.username, User.id != x_user_id)
    )
    if taken.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username {profile.username} is already taken",
        )

    encrypted_token = None
    if profile.github_access_token:
        if encryption_service is None:
            raise ConfigurationFailure(
                "TOKEN_ENCRYPTION_KEY is not set",
                public_message="GitHub token storage is not configured",
            )
        encrypted_token = encryption_service.encrypt(profile.github_access_token)

    user = await db.get(User, x_user_id)
    if user is None:
        user = User(id=x_user_id, username=profile.username)
        db.add(user)
        provided = set(ProfileUpdate.model_fields)
    else:
        # Existing users keep whatever the sign-in payload leaves out
        provided = profile.model_fields_set

    user.username = profile.username
    for field in PROFILE_FIELDS:
        if field in provided:
            setattr(user, field, getattr(profile, field))
    if "github_access_token" in provided:
        user.github_access_token_encrypted = encrypted_token

    await db.commit()
    await db.refresh(user)

    return _user_response(user)


@router.get("", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)):
    """Get the signed-in user."""
    return _user_response(user)


# Project endpoints
@router.get("/projects", response_model=list[OwnerProjectResponse])
async def list_my_projects(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's projects, most recently active first."""
    query = (
        select(Project)
        .where(Project.user_id == user.id)
        .order_by(Project.last_activity_at.desc())
    )
    result = await db.execute(query)
    return [OwnerProjectResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/projects/{project_id}", response_model=OwnerProjectResponse)
async def get_my_project(project: Project = Depends(get_owned_project)):
    """Get one of the user's projects."""
    return OwnerProjectResponse.model_validate(project)


@router.put("/projects/{project_id}/status", response_model=OwnerProjectResponse)
async def update_my_project_status(
    status_data: StatusUpdate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Change a project's status."""
    previous = project.status
    now = utcnow()
    project.status = status_data.status
    project.updated_at = now
    project.last_activity_at = now
    await db.commit()

    await log_activity(
        db,
        project.id,
        "status_changed",
        {"from": previous.value if previous else None, "to": status_data.status.value},
        actor=ActivityActor.user,
        at=now,
    )
    await db.refresh(project)
    return OwnerProjectResponse.model_validate(project)


@router.put("/projects/{project_id}/tags")
async def update_my_project_tags(
    tags_data: TagsUpdate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Replace a project's tags; new tag names join the catalog."""
    now = utcnow()
    tags = await replace_project_tags(db, project.id, tags_data.tags)
    await add_to_catalog(db, tags_data.tags)
    project.updated_at = now
    project.last_activity_at = now
    await db.commit()
    grouped = group_tags(tags)

    await log_activity(
        db,
        project.id,
        "tags_updated",
        {"tags": [{"tag_type": t.tag_type.value, "tag_value": t.tag_value} for t in tags]},
        actor=ActivityActor.user,
        at=now,
    )
    return {"success": True, "tags": grouped}


@router.get("/projects/{project_id}/tags", response_model=GroupedTags)
async def get_my_project_tags(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Get a project's tags grouped by type."""
    return group_tags(await get_project_tags(db, project.id))


@router.put("/projects/{project_id}/visibility", response_model=OwnerProjectResponse)
async def update_my_project_visibility(
    visibility: VisibilityUpdate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Show or hide a project on the owner's public profile."""
    now = utcnow()
    project.is_public = visibility.is_public
    project.updated_at = now
    project.last_activity_at = now
    await db.commit()

    await log_activity(
        db,
        project.id,
        "visibility_changed",
        {"is_public": visibility.is_public},
        actor=ActivityActor.user,
        at=now,
    )
    await db.refresh(project)
    return OwnerProjectResponse.model_validate(project)


@router.delete("/projects/{project_id}")
async def delete_my_project(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
    storage: ScreenshotStorage = Depends(get_screenshot_storage),
):
    """
    Delete a project together with its tags and activity log.

    The stored screenshot is removed once the rows are gone.
    """
    project_id = project.id
    screenshot_key = storage.key_from_url(project.screenshot_url)

    await db.delete(project)
    await db.commit()

    if screenshot_key:
        storage.delete(screenshot_key)
    logger.info("Deleted project %s", project_id)
    return {"success": True}


@router.delete("/projects/{project_id}/screenshot")
async def delete_my_project_screenshot(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
    storage: ScreenshotStorage = Depends(get_screenshot_storage),
):
    """Remove a project's screenshot."""
    if not project.screenshot_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project has no screenshot",
        )

    screenshot_key = storage.key_from_url(project.screenshot_url)
    now = utcnow()
    project.screenshot_url = None
    project.updated_at = now
    project.last_activity_at = now
    await db.commit()

    if screenshot_key:
        storage.delete(screenshot_key)

    await log_activity(db, project.id, "screenshot_removed", actor=ActivityActor.user, at=now)
    return {"success": True}



# API key endpoints
@router.post(
    "/projects/{project_id}/api-key",
    response_model=ApiKeyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_project_api_key(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Generate a new API key for a project, replacing any existing one.

    This is the only time the full key is returned.
    """
    api_key = generate_api_key()
    project.api_key = api_key
    await db.commit()

    return ApiKeyResponse(
        api_key=api_key,
        masked_key=mask_api_key(api_key),
        endpoint=project_endpoint(settings.base_url, project.id),
    )


@router.delete("/projects/{project_id}/api-key")
async def revoke_project_api_key(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """Revoke a project's API key."""
    project.api_key = None
    await db.commit()
    return {"success": True}


@router.get("/projects/{project_id}/ai-prompt", response_model=AiPromptResponse)
async def get_ai_prompt(
    reveal: bool = Query(False, description="Embed the full API key instead of a masked one"),
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Setup prompt for connecting an AI tool to this project."""
    if not project.api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Generate an API key for this project first",
        )

    tags = await get_project_tags(db, project.id)
    prompt = generate_ai_context_prompt(
        project,
        tags,
        project.api_key,
        settings.base_url,
        reveal_key=reveal,
        synced_at=utcnow(),
    )
    return AiPromptResponse(
        bootstrap_prompt=generate_bootstrap_prompt(project.name, settings.base_url),
        prompt=prompt,
        api_key_masked=not reveal,
    )


# Webhook endpoints
@router.put("/projects/{project_id}/webhook", response_model=WebhookToggleResponse)
async def toggle_project_webhook(
    toggle: WebhookToggle,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Enable or disable GitHub webhook processing for a project.

    The webhook itself still has to be added in the repository settings on
    GitHub, pointing at ``webhook_url``.
    """
    if not project.github_repo_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project is not connected to a GitHub repository",
        )

    project.github_webhook_enabled = toggle.enabled
    project.updated_at = utcnow()
    await db.commit()

    return WebhookToggleResponse(enabled=toggle.enabled, webhook_url=settings.webhook_url)


# Activity endpoints
@router.get("/projects/{project_id}/activity", response_model=ActivityListResponse)
async def get_project_activity(
    limit: int = Query(50, ge=1, le=200),
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    """All activity (user, API and webhook) for one project, newest first."""
    entries = await list_project_activity(db, project.id, limit=limit)
    return ActivityListResponse(activity=[ActivityLogResponse.model_validate(e) for e in entries])


@router.get("/activity", response_model=ActivityFeedResponse)
async def get_activity_feed(
    limit: int = Query(20, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Recent activity across all of the user's projects."""
    rows = await list_owner_activity(db, user.id, limit=limit)
    return ActivityFeedResponse(
        activity=[
            ActivityFeedItem(
                **ActivityLogResponse.model_validate(entry).model_dump(),
                project_name=project.name,
                project_slug=project.slug,
            )
            for entry, project in rows
        ]
    )
