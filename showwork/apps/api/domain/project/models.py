"""Project domain models."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from core.database import Base


class Visibility(str, enum.Enum):
    """Who may read a project."""

    PUBLIC = "PUBLIC"
    DRAFT = "DRAFT"  # owner-only, work in progress
    PRIVATE = "PRIVATE"  # owner-only, intentionally unlisted


class ProjectStatus(str, enum.Enum):
    """Development status of a project."""

    COMPLETED = "COMPLETED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"


class Project(Base):
    """A unit of showcased work owned by a profile."""

    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    profile_id = Column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    title = Column(String(200), nullable=False)
    slug = Column(String(220), nullable=False)
    short_desc = Column(String(500), nullable=True)
    full_desc = Column(Text, nullable=True)

    # Media and links
    cover_image_url = Column(Text, nullable=True)
    demo_video_url = Column(Text, nullable=True)
    github_url = Column(Text, nullable=True)
    live_url = Column(Text, nullable=True)

    visibility = Column(Enum(Visibility), default=Visibility.PUBLIC, nullable=False)
    status = Column(
        Enum(ProjectStatus), default=ProjectStatus.COMPLETED, nullable=False
    )
    category = Column(String(50), nullable=True)

    # Denormalized counters, only ever changed by atomic +/- 1 updates
    likes_count = Column(Integer, default=0, nullable=False)
    saves_count = Column(Integer, default=0, nullable=False)
    views_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner = relationship("Profile", back_populates="projects", lazy="selectin")
    skills = relationship(
        "Skill",
        secondary="project_skills",
        lazy="selectin",
        order_by="Skill.name",
    )

    __table_args__ = (
        Index("ix_projects_profile_created", "profile_id", "created_at"),
        Index("ix_projects_visibility_created", "visibility", "created_at"),
        Index("ix_projects_visibility_likes", "visibility", "likes_count"),
        Index("ix_projects_category", "category"),
    )

    @property
    def tag_names(self) -> list[str]:
        return [skill.name for skill in self.skills]

    def __repr__(self):
        return f"<Project(id={self.id}, title={self.title}, visibility={self.visibility})>"
