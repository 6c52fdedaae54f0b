"""GitHub webhook event routing.

A verified delivery is fanned out to every project linked to the delivery's
repository with webhook processing enabled. Each project is handled in its
own session; one project failing does not stop the others, and every
outcome is reported back.
"""

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vibeship.core.timeutils import utcnow
from vibeship.models.database import ActivityActor, Project
from vibeship.models.schemas.webhook import (
    ForkEventPayload,
    PushEventPayload,
    ReleaseEventPayload,
    StarEventPayload,
    WebhookPayload,
    WebhookProjectResult,
    WebhookResponse,
)
from vibeship.services.activity_logger import log_activity
from vibeship.services.stat_sync import RepositoryStats, sync_github_stats

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"
MAX_LOGGED_COMMITS = 3


class WebhookEvent(str, enum.Enum):
    """Event types named by the X-GitHub-Event header."""

    push = "push"
    release = "release"
    star = "star"
    fork = "fork"
    issues = "issues"
    pull_request = "pull_request"
    other = "other"

    @classmethod
    def from_header(cls, value: str) -> "WebhookEvent":
        """Map a header value to an event, unknown types become ``other``."""
        try:
            return cls(value)
        except ValueError:
            return cls.other


EventHandler = Callable[[AsyncSession, str, dict[str, Any]], Awaitable[None]]


async def find_linked_projects(session: AsyncSession, repo_id: int) -> list[Project]:
    """Projects whose stored GitHub repository ID equals repo_id."""
    result = await session.execute(select(Project).where(Project.github_repo_id == repo_id))
    return list(result.scalars().all())


def branch_from_ref(ref: str | None) -> str:
    """``refs/heads/main`` -> ``main``; other refs are kept as is."""
    if not ref:
        return "unknown"
    if ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX):] or "unknown"
    return ref


async def _log_webhook_activity(
    session: AsyncSession, project_id: str, action: str, details: dict[str, Any]
) -> None:
    await log_activity(session, project_id, action, details, actor=ActivityActor.webhook)


async def handle_push(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    event = PushEventPayload.model_validate(payload)

    await _log_webhook_activity(
        session,
        project_id,
        "github_push",
        {
            "branch": branch_from_ref(event.ref),
            "commit_count": len(event.commits),
            "commits": [
                {
                    "message": commit.message.split("\n")[0],  # First line only
                    "author": commit.author.name,
                }
                for commit in event.commits[:MAX_LOGGED_COMMITS]
            ],
            "pusher": event.pusher.name if event.pusher else None,
        },
    )


async def handle_release(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    event = ReleaseEventPayload.model_validate(payload)
    if event.action != "published":
        return

    release = event.release
    await _log_webhook_activity(
        session,
        project_id,
        "github_release",
        {
            "tag": release.tag_name if release else None,
            "name": release.name if release else None,
            "url": release.html_url if release else None,
        },
    )


async def handle_star(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    event = StarEventPayload.model_validate(payload)
    # A new star is logged, so it counts as activity
    touched_at = utcnow() if event.action == "created" else None
    await sync_github_stats(
        session, project_id, RepositoryStats.from_repository(event.repository), touched_at=touched_at
    )

    if event.action == "created":
        await _log_webhook_activity(
            session,
            project_id,
            "github_starred",
            {
                "by": event.sender.login if event.sender else None,
                "total_stars": event.repository.stargazers_count,
            },
        )


async def handle_fork(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    event = ForkEventPayload.model_validate(payload)
    await sync_github_stats(
        session, project_id, RepositoryStats.from_repository(event.repository), touched_at=utcnow()
    )

    await _log_webhook_activity(
        session,
        project_id,
        "github_forked",
        {
            "by": event.sender.login if event.sender else None,
            "fork_url": event.forkee.html_url if event.forkee else None,
            "total_forks": event.repository.forks_count,
        },
    )


async def handle_stats_only(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    """Issue and pull request events only change the open issue count."""
    event = WebhookPayload.model_validate(payload)
    await sync_github_stats(session, project_id, RepositoryStats.from_repository(event.repository))


async def handle_other(session: AsyncSession, project_id: str, payload: dict[str, Any]) -> None:
    """Unhandled event types are accepted and ignored."""


EVENT_HANDLERS: dict[WebhookEvent, EventHandler] = {
    WebhookEvent.push: handle_push,
    WebhookEvent.release: handle_release,
    WebhookEvent.star: handle_star,
    WebhookEvent.fork: handle_fork,
    WebhookEvent.issues: handle_stats_only,
    WebhookEvent.pull_request: handle_stats_only,
    WebhookEvent.other: handle_other,
}


async def process_for_project(
    session_factory: async_sessionmaker[AsyncSession],
    event: WebhookEvent,
    project_id: str,
    payload: dict[str, Any],
) -> WebhookProjectResult:
    """Run one event for one project in its own session, capturing failure."""
    handler = EVENT_HANDLERS[event]
    try:
        async with session_factory() as session:
            await handler(session, project_id, payload)
    except Exception as e:
        logger.exception("Error processing %s webhook for project %s", event.value, project_id)
        return WebhookProjectResult(project_id=project_id, success=False, error=str(e))

    return WebhookProjectResult(project_id=project_id, success=True)


async def route_webhook_event(
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    event_name: str,
    payload: dict[str, Any],
    repo_id: int,
) -> WebhookResponse:
    """
    Dispatch a verified delivery to every enabled linked project.

    Args:
        session: Session used to look up linked projects
        session_factory: Factory for the per-project sessions
        event_name: Raw X-GitHub-Event header value
        payload: Parsed delivery body
        repo_id: Repository ID from the payload

    Returns:
        Summary with one result per processed project
    """
    projects = await find_linked_projects(session, repo_id)
    if not projects:
        return WebhookResponse(message="No linked projects", event=event_name)

    enabled_ids = [project.id for project in projects if project.github_webhook_enabled]
    if not enabled_ids:
        return WebhookResponse(message="No projects with webhooks enabled", event=event_name)

    event = WebhookEvent.from_header(event_name)
    results = await asyncio.gather(
        *(process_for_project(session_factory, event, project_id, payload) for project_id in enabled_ids)
    )

    return WebhookResponse(message="Webhook processed", event=event_name, results=list(results))
