"""Engagement (like/save) domain models."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Uuid

from core.database import Base


class EngagementKind(str, enum.Enum):
    """Kinds of viewer-project relationships."""

    LIKE = "like"
    SAVE = "save"


class ProjectLike(Base):
    """A profile liking a project. Unique per pair."""

    __tablename__ = "project_likes"

    profile_id = Column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    project_id = Column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (Index("ix_project_likes_project", "project_id"),)


class ProjectSave(Base):
    """A profile bookmarking a project. Unique per pair."""

    __tablename__ = "project_saves"

    profile_id = Column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    project_id = Column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        Index("ix_project_saves_project", "project_id"),
        Index("ix_project_saves_profile_created", "profile_id", "created_at"),
    )


RECORD_MODELS = {
    EngagementKind.LIKE: ProjectLike,
    EngagementKind.SAVE: ProjectSave,
}

COUNTER_COLUMNS = {
    EngagementKind.LIKE: "likes_count",
    EngagementKind.SAVE: "saves_count",
}
