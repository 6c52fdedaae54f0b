"""User and tag catalog schemas."""

from datetime import datetime
from pydantic import BaseModel, Field

from vibeship.models.database.project_tag import TagType


class ProfileUpdate(BaseModel):
    """User data forwarded by the auth provider after sign-in."""

    username: str = Field(..., min_length=1, max_length=64)
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    github_username: str | None = None
    github_access_token: str | None = None


class UserResponse(BaseModel):
    id: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    github_username: str | None = None
    github_connected: bool
    created_at: datetime


class TagCatalogEntry(BaseModel):
    id: int
    name: str
    type: TagType
    icon_url: str | None = None
    color: str | None = None

    class Config:
        from_attributes = True


class TagCatalogResponse(BaseModel):
    tags: list[TagCatalogEntry]
