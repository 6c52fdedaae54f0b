"""Append-only activity log.

An entry is written for every meaningful action on a project. Writes are
best effort: a failed log write is logged and swallowed so it never fails
the operation being recorded. Appending an entry also stamps the project's
``last_activity_at``, except for plain reads.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.timeutils import utcnow
from vibeship.models.database import (
    USER_AGENT_USER,
    USER_AGENT_WEBHOOK,
    ActivityActor,
    ActivityLogEntry,
    Project,
)

logger = logging.getLogger(__name__)

# Actions that record an access rather than a change
READ_ACTION = "read"


async def log_activity(
    session: AsyncSession,
    project_id: str,
    action: str,
    details: dict[str, Any] | None = None,
    *,
    actor: ActivityActor,
    ip_address: str | None = None,
    user_agent: str | None = None,
    touch_project: bool = True,
    at: datetime | None = None,
) -> ActivityLogEntry | None:
    """
    Append one activity entry and commit it.

    Args:
        session: Database session
        project_id: Project the action was taken against
        action: Action label, e.g. ``update_status`` or ``github_push``
        details: Structured details payload
        actor: Who performed the action
        ip_address: Requester IP, for API calls
        user_agent: Requester user agent; defaults to the actor's sentinel
        touch_project: Also stamp the project's last_activity_at
        at: Timestamp to record, defaults to now

    Returns:
        The stored entry, or None if the write failed
    """
    now = at or utcnow()
    if user_agent is None:
        user_agent = _default_user_agent(actor)

    entry = ActivityLogEntry(
        project_id=project_id,
        action=action,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        actor=actor,
        created_at=now,
    )

    try:
        session.add(entry)
        if touch_project:
            await session.execute(
                update(Project).where(Project.id == project_id).values(last_activity_at=now)
            )
        await session.commit()
    except Exception:
        logger.exception("Failed to log activity %r for project %s", action, project_id)
        await session.rollback()
        return None

    return entry


def _default_user_agent(actor: ActivityActor) -> str | None:
    if actor == ActivityActor.user:
        return USER_AGENT_USER
    if actor == ActivityActor.webhook:
        return USER_AGENT_WEBHOOK
    return None


async def list_project_activity(
    session: AsyncSession, project_id: str, limit: int = 50
) -> list[ActivityLogEntry]:
    """Newest-first activity for one project."""
    query = (
        select(ActivityLogEntry)
        .where(ActivityLogEntry.project_id == project_id)
        .order_by(ActivityLogEntry.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def list_owner_activity(
    session: AsyncSession, user_id: str, limit: int = 20
) -> list[tuple[ActivityLogEntry, Project]]:
    """Newest-first activity across all of a user's projects."""
    query = (
        select(ActivityLogEntry, Project)
        .join(Project, ActivityLogEntry.project_id == Project.id)
        .where(Project.user_id == user_id)
        .order_by(ActivityLogEntry.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    return [(entry, project) for entry, project in result.all()]
