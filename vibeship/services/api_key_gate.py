"""Bearer-key authentication for the per-project API."""

from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.errors import AuthenticationFailure
from vibeship.core.security.api_keys import extract_bearer_token
from vibeship.models.database import Project


async def authenticate_project_key(
    session: AsyncSession, project_id: str, authorization: str | None
) -> Project:
    """
    Check an ``Authorization: Bearer <key>`` header against a project's key.

    Every failure is a 401; the message says which check failed since the
    API is developer-facing.

    Args:
        session: Database session
        project_id: Project the request targets
        authorization: Raw Authorization header value

    Returns:
        The authenticated project

    Raises:
        AuthenticationFailure: Missing header, unknown project, or wrong key
    """
    api_key = extract_bearer_token(authorization)
    if api_key is None:
        raise AuthenticationFailure("Missing or invalid Authorization header")

    project = await session.get(Project, project_id)
    if project is None:
        raise AuthenticationFailure("Project not found")

    # Plain equality; see DESIGN.md on constant-time comparison
    if not project.api_key or project.api_key != api_key:
        raise AuthenticationFailure("Invalid API key")

    return project
