"""Project schemas for API validation."""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from vibeship.models.database.project import ProjectStatus
from vibeship.models.database.project_tag import TagType


class TagInput(BaseModel):
    """A tag assignment as supplied by clients."""

    tag_type: TagType
    tag_value: str = Field(..., min_length=1, max_length=100)

    @field_validator("tag_value")
    @classmethod
    def strip_tag_value(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tag_value must not be blank")
        return value


class GroupedTags(BaseModel):
    """Tags grouped by type, each list in insertion order."""

    models: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)


class ProjectLinks(BaseModel):
    github: str | None = None
    live: str | None = None


class GitHubStats(BaseModel):
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    language: str | None = None


class ProjectContext(BaseModel):
    """Project state as read by AI tools."""

    id: str
    name: str
    description: str | None = None
    status: ProjectStatus
    where_i_left_off: str | None = None
    lessons_learned: str | None = None
    tags: GroupedTags
    links: ProjectLinks
    github_stats: GitHubStats
    created_at: datetime
    updated_at: datetime
    last_activity_at: datetime


class ProjectContextResponse(BaseModel):
    """Response for GET on the project API."""

    project: ProjectContext


class ProjectUpdateResponse(BaseModel):
    """Response for PATCH on the project API."""

    success: bool = True
    updated: list[str]
    tags_updated: bool
    timestamp: datetime


class ScreenshotUploadResponse(BaseModel):
    success: bool = True
    screenshot_url: str
    size: int
    timestamp: datetime


class OwnerProjectResponse(BaseModel):
    """Full project record as seen by its owner."""

    id: str
    name: str
    slug: str
    description: str | None = None
    status: ProjectStatus
    is_public: bool
    live_url: str | None = None
    screenshot_url: str | None = None
    github_repo_url: str | None = None
    github_repo_id: int | None = None
    github_stars: int
    github_forks: int
    github_open_issues: int
    github_language: str | None = None
    github_autosync: bool
    github_webhook_enabled: bool
    github_synced_at: datetime | None = None
    where_i_left_off: str | None = None
    lessons_learned: str | None = None
    has_api_key: bool = False
    created_at: datetime
    updated_at: datetime
    last_activity_at: datetime

    class Config:
        from_attributes = True


class ApiKeyResponse(BaseModel):
    """Freshly generated key; the only time the full key is returned."""

    api_key: str
    masked_key: str
    endpoint: str


class StatusUpdate(BaseModel):
    status: ProjectStatus


class TagsUpdate(BaseModel):
    tags: list[TagInput]


class WebhookToggle(BaseModel):
    enabled: bool


class WebhookToggleResponse(BaseModel):
    success: bool = True
    enabled: bool
    webhook_url: str


class AiPromptResponse(BaseModel):
    """Setup prompt an owner copies into their AI tool."""

    bootstrap_prompt: str
    prompt: str
    api_key_masked: bool


class VisibilityUpdate(BaseModel):
    is_public: bool


class AutosyncToggle(BaseModel):
    enabled: bool
