"""Activity log database model."""

import enum
import uuid
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, JSON, String
from sqlalchemy.orm import relationship

from vibeship.core.storage.database import Base
from vibeship.core.timeutils import utcnow


class ActivityActor(str, enum.Enum):
    """Who performed a logged action."""

    user = "user"
    api = "api"
    webhook = "webhook"


# Sentinel user agents stored for actions that did not come from an API client
USER_AGENT_USER = "VibeShip User"
USER_AGENT_WEBHOOK = "GitHub Webhook"


class ActivityLogEntry(Base):
    """Append-only audit record of an action taken against a project."""

    __tablename__ = "api_activity_log"
    __table_args__ = (Index("ix_api_activity_log_project_created", "project_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    action = Column(String(255), nullable=False)  # e.g. update_status, github_push
    details = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    actor = Column(Enum(ActivityActor), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    project = relationship("Project", back_populates="activity")
