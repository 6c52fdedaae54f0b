"""Project tag and tag catalog database models."""

import enum
from sqlalchemy import Column, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from vibeship.core.storage.database import Base


class TagType(str, enum.Enum):
    """Kind of tech-stack tag."""

    model = "model"
    framework = "framework"
    tool = "tool"


class ProjectTag(Base):
    """A (tag_type, tag_value) pair attached to a project."""

    __tablename__ = "project_tags"
    __table_args__ = (
        UniqueConstraint("project_id", "tag_type", "tag_value", name="uq_project_tags_value"),
    )

    # Integer key keeps insertion order for grouped tag lists
    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag_type = Column(Enum(TagType), nullable=False)
    tag_value = Column(String(100), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="tags")


class TagCatalog(Base):
    """Global list of known tag names, used for autocomplete."""

    __tablename__ = "tags_catalog"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    type = Column(Enum(TagType), nullable=False)
    icon_url = Column(String(1024), nullable=True)
    color = Column(String(32), nullable=True)
