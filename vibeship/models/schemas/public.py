"""Schemas for public profile and discovery pages."""

from datetime import datetime
from pydantic import BaseModel

from vibeship.models.database.project import ProjectStatus
from vibeship.models.schemas.project import GroupedTags


class PublicProject(BaseModel):
    """Project fields safe to show to anyone."""

    id: str
    name: str
    slug: str
    description: str | None = None
    status: ProjectStatus
    live_url: str | None = None
    screenshot_url: str | None = None
    github_repo_url: str | None = None
    github_stars: int
    github_forks: int
    github_language: str | None = None
    tags: GroupedTags
    owner_username: str
    last_activity_at: datetime
    created_at: datetime


class PublicProfile(BaseModel):
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    github_username: str | None = None
    projects: list[PublicProject]


class DiscoverResponse(BaseModel):
    projects: list[PublicProject]
