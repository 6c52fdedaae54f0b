"""Project database model."""

import enum
import uuid
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vibeship.core.storage.database import Base
from vibeship.core.timeutils import utcnow


class ProjectStatus(str, enum.Enum):
    """Project lifecycle status."""

    active = "active"
    paused = "paused"
    shipped = "shipped"
    graveyard = "graveyard"


class Project(Base):
    """A tracked side project."""

    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="uq_projects_user_slug"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.active, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)

    # Links
    live_url = Column(String(1024), nullable=True)
    screenshot_url = Column(String(1024), nullable=True)

    # GitHub link and cached stats
    github_repo_url = Column(String(1024), nullable=True)
    github_repo_id = Column(BigInteger, nullable=True, index=True)
    github_stars = Column(Integer, default=0, nullable=False)
    github_forks = Column(Integer, default=0, nullable=False)
    github_open_issues = Column(Integer, default=0, nullable=False)
    github_language = Column(String(100), nullable=True)
    github_autosync = Column(Boolean, default=False, nullable=False)
    github_webhook_enabled = Column(Boolean, default=False, nullable=False)
    github_synced_at = Column(DateTime, nullable=True)

    # Progress notes, writable by AI tools
    where_i_left_off = Column(Text, nullable=True)
    lessons_learned = Column(Text, nullable=True)

    # At most one live key; null when revoked
    api_key = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    last_activity_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="projects")
    tags = relationship(
        "ProjectTag",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectTag.id",
    )
    activity = relationship(
        "ActivityLogEntry",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None
