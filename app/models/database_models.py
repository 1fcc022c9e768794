"""
SQLAlchemy ORM models for the PRD Forge database.
"""
from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """User account (synced from the frontend's auth provider)."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)  # external auth id
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    prds = relationship("PRD", back_populates="user", cascade="all, delete-orphan")


class PRD(Base):
    """
    A generated Product Requirements Document.

    ``json_data`` holds the structured content (startup_name + seven sections);
    ``markdown`` is always the rendering of ``json_data`` and is never written
    from client input.  ``description`` is set once on insert.
    """

    __tablename__ = "prds"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    markdown = Column(Text, nullable=False)
    json_data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    user = relationship("User", back_populates="prds")


class PendingIdea(Base):
    """An idea submitted before login, redeemable once by token."""

    __tablename__ = "pending_ideas"

    token = Column(String(64), primary_key=True)
    idea = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
