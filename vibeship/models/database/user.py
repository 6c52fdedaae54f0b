"""User database model."""

import uuid
from sqlalchemy import Column, String, DateTime, Text, LargeBinary
from sqlalchemy.orm import relationship

from vibeship.core.storage.database import Base
from vibeship.core.timeutils import utcnow


class User(Base):
    """Local mirror of a user managed by the external auth provider."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(64), nullable=False, unique=True)
    display_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    bio = Column(Text, nullable=True)
    github_username = Column(String(255), nullable=True)
    github_access_token_encrypted = Column(LargeBinary, nullable=True)  # Fernet-encrypted
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
