"""Shared FastAPI dependencies."""

import logging

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.config import Settings, get_settings
from vibeship.core.errors import ConfigurationFailure
from vibeship.core.storage.database import get_db
from vibeship.models.database import Project, User
from vibeship.services.api_key_gate import authenticate_project_key

logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the signed-in user.

    Sessions are managed by the external auth provider; its proxy forwards
    the authenticated user's ID in the X-User-Id header.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user = await db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


async def get_owned_project(
    project_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Project:
    """Load a project the current user owns."""
    project = await db.get(Project, project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with id {project_id} not found",
        )
    if project.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return project


async def get_authorized_project(
    project_id: str,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Project:
    """Load a project after checking the request's bearer key."""
    return await authenticate_project_key(db, project_id, authorization)


def get_webhook_secret(settings: Settings = Depends(get_settings)) -> str:
    """The configured webhook secret; a missing secret is a server error."""
    if not settings.github_webhook_secret:
        logger.error("GITHUB_WEBHOOK_SECRET not configured")
        raise ConfigurationFailure(
            "GITHUB_WEBHOOK_SECRET not configured", public_message="Webhook not configured"
        )
    return settings.github_webhook_secret


def client_ip(request: Request) -> str:
    """Requester IP, preferring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


def client_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"
