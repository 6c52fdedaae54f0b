"""Activity log schemas."""

from datetime import datetime
from typing import Any
from pydantic import BaseModel

from vibeship.models.database.activity_log import ActivityActor


class ActivityLogResponse(BaseModel):
    """A single activity log entry."""

    id: str
    project_id: str
    action: str
    details: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    actor: ActivityActor
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    activity: list[ActivityLogResponse]


class ActivityFeedItem(ActivityLogResponse):
    """Activity entry annotated with its project, for the dashboard feed."""

    project_name: str
    project_slug: str


class ActivityFeedResponse(BaseModel):
    activity: list[ActivityFeedItem]
