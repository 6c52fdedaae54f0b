"""Database models."""

from vibeship.models.database.user import User
from vibeship.models.database.project import Project, ProjectStatus
from vibeship.models.database.project_tag import ProjectTag, TagCatalog, TagType
from vibeship.models.database.activity_log import (
    USER_AGENT_USER,
    USER_AGENT_WEBHOOK,
    ActivityActor,
    ActivityLogEntry,
)

__all__ = [
    "User",
    "Project",
    "ProjectStatus",
    "ProjectTag",
    "TagCatalog",
    "TagType",
    "ActivityActor",
    "ActivityLogEntry",
    "USER_AGENT_USER",
    "USER_AGENT_WEBHOOK",
]
