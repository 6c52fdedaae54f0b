"""API schemas."""

from vibeship.models.schemas.project import (
    GroupedTags,
    ProjectLinks,
    GitHubStats,
    ProjectContext,
    ProjectContextResponse,
    ProjectUpdateResponse,
    ScreenshotUploadResponse,
    TagInput,
)
from vibeship.models.schemas.activity import (
    ActivityLogResponse,
    ActivityListResponse,
    ActivityFeedItem,
    ActivityFeedResponse,
)

__all__ = [
    "GroupedTags",
    "ProjectLinks",
    "GitHubStats",
    "ProjectContext",
    "ProjectContextResponse",
    "ProjectUpdateResponse",
    "ScreenshotUploadResponse",
    "TagInput",
    "ActivityLogResponse",
    "ActivityListResponse",
    "ActivityFeedItem",
    "ActivityFeedResponse",
]
