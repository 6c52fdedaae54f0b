"""Project API routes used by AI coding tools.

Every route is authenticated with the project's bearer key and every call
is recorded in the activity log.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.api.deps import client_ip, client_user_agent, get_authorized_project
from vibeship.core.config import Settings, get_settings
from vibeship.core.errors import UpstreamFailure, ValidationFailure
from vibeship.core.storage.database import get_db
from vibeship.core.storage.screenshot_storage import (
    ScreenshotStorage,
    decode_data_url,
    get_screenshot_storage,
)
from vibeship.core.timeutils import utcnow
from vibeship.models.database import ActivityActor, Project
from vibeship.models.schemas.project import (
    ProjectContextResponse,
    ProjectUpdateResponse,
    ScreenshotUploadResponse,
)
from vibeship.services.activity_logger import READ_ACTION, log_activity
from vibeship.services.context_formatter import build_project_context
from vibeship.services.field_update_filter import filter_project_update
from vibeship.services.tags import add_to_catalog, get_project_tags, replace_project_tags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["project-api"])


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        raise ValidationFailure("Invalid JSON body")


@router.get("/{project_id}", response_model=ProjectContextResponse)
async def read_project_context(
    request: Request,
    project: Project = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
):
    """Read the project's current state, tags and GitHub stats."""
    tags = await get_project_tags(db, project.id)
    context = build_project_context(project, tags)

    await log_activity(
        db,
        project.id,
        READ_ACTION,
        None,
        actor=ActivityActor.api,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        touch_project=False,
    )

    return ProjectContextResponse(project=context)


@router.patch("/{project_id}", response_model=ProjectUpdateResponse)
async def update_project_context(
    request: Request,
    project: Project = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
):
    """
    Update allow-listed fields and optionally replace the tag set.

    The body is fully validated before anything is written; an invalid value
    anywhere rejects the whole request.
    """
    plan = filter_project_update(await _read_json(request))
    now = utcnow()

    for field, value in plan.fields.items():
        setattr(project, field, value)
    project.updated_at = now
    project.last_activity_at = now

    try:
        if plan.tags is not None:
            await replace_project_tags(db, project.id, plan.tags)
            await add_to_catalog(db, plan.tags)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("Failed to update project %s: %s", project.id, e)
        await db.rollback()
        raise UpstreamFailure(str(e))

    details = {"fields": plan.changed_fields, "values": jsonable_encoder(plan.fields)}
    if plan.tags is not None:
        details["tags"] = jsonable_encoder(plan.tags)

    await log_activity(
        db,
        project.id,
        plan.action,
        details,
        actor=ActivityActor.api,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        at=now,
    )

    return ProjectUpdateResponse(
        updated=plan.changed_fields,
        tags_updated=plan.tags_updated,
        timestamp=now,
    )


@router.post("/{project_id}/screenshot", response_model=ScreenshotUploadResponse)
async def upload_project_screenshot(
    request: Request,
    project: Project = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
    storage: ScreenshotStorage = Depends(get_screenshot_storage),
    settings: Settings = Depends(get_settings),
):
    """Upload a screenshot sent as a base64 data URL, replacing the old one."""
    body = await _read_json(request)
    if not isinstance(body, dict):
        raise ValidationFailure("Invalid JSON body")

    image = decode_data_url(body.get("image"), settings.screenshot_max_bytes)
    previous_key = storage.key_from_url(project.screenshot_url)

    try:
        key = storage.save(project.user_id, project.id, image)
    except (OSError, ValueError) as e:
        logger.error("Screenshot upload error for project %s: %s", project.id, e)
        raise UpstreamFailure("Failed to upload screenshot")

    now = utcnow()
    screenshot_url = storage.public_url(key)
    project.screenshot_url = screenshot_url
    project.updated_at = now
    project.last_activity_at = now

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        storage.delete(key)
        logger.error("Project update error after screenshot upload: %s", e)
        raise UpstreamFailure("Screenshot uploaded but failed to update project")

    if previous_key and previous_key != key:
        storage.delete(previous_key)

    await log_activity(
        db,
        project.id,
        "upload_screenshot",
        {"size": len(image.data), "type": image.image_type},
        actor=ActivityActor.api,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        at=now,
    )

    return ScreenshotUploadResponse(
        screenshot_url=screenshot_url,
        size=len(image.data),
        timestamp=now,
    )
