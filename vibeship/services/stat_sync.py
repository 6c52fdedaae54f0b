"""Cached GitHub statistics on projects."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.core.timeutils import utcnow
from vibeship.models.database import Project


@dataclass(frozen=True)
class RepositoryStats:
    """Snapshot of a repository's counters."""

    stars: int
    forks: int
    open_issues: int
    language: str | None = None

    @classmethod
    def from_repository(cls, repository: Any) -> "RepositoryStats":
        """Build from any object with GitHub's ``*_count`` attributes."""
        return cls(
            stars=repository.stargazers_count,
            forks=repository.forks_count,
            open_issues=repository.open_issues_count,
            language=getattr(repository, "language", None),
        )


async def sync_github_stats(
    session: AsyncSession,
    project_id: str,
    stats: RepositoryStats,
    synced_at: datetime | None = None,
    touched_at: datetime | None = None,
) -> None:
    """
    Overwrite a project's cached counters with a snapshot and commit.

    Last writer wins: counters are replaced, never incremented, so applying
    the same snapshot twice leaves the same result. The language is only
    written when the snapshot carries one. ``touched_at`` also moves
    ``last_activity_at`` in the same commit, for syncs that get logged.
    """
    values: dict[str, Any] = {
        "github_stars": stats.stars,
        "github_forks": stats.forks,
        "github_open_issues": stats.open_issues,
        "github_synced_at": synced_at or utcnow(),
    }
    if stats.language is not None:
        values["github_language"] = stats.language
    if touched_at is not None:
        values["last_activity_at"] = touched_at

    await session.execute(update(Project).where(Project.id == project_id).values(**values))
    await session.commit()
