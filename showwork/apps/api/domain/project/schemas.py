"""Project domain schemas."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.project.models import ProjectStatus, Visibility

# Category catalogue shown on the categories page
CATEGORIES = (
    "fullstack",
    "frontend",
    "backend",
    "ml",
    "mobile",
    "data",
    "devops",
    "uiux",
    "security",
    "embedded",
    "web3",
    "game",
)

T = TypeVar("T")


class SortOrder(str, Enum):
    """Directory sort orders."""

    recent = "recent"
    popular = "popular"
    # likes then views; not time-decayed
    trending = "trending"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProjectBase(BaseModel):
    """Fields shared by create and update payloads."""

    short_desc: Optional[str] = Field(None, max_length=500)
    full_desc: Optional[str] = Field(None, max_length=20000)
    cover_image_url: Optional[str] = Field(None, max_length=2000)
    demo_video_url: Optional[str] = Field(None, max_length=2000)
    github_url: Optional[str] = Field(None, max_length=2000)
    live_url: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50)

    @field_validator(
        "cover_image_url",
        "demo_video_url",
        "github_url",
        "live_url",
        "category",
    )
    @classmethod
    def empty_string_is_none(cls, v):
        return _blank_to_none(v)


class ProjectCreate(ProjectBase):
    """Draft-save or publish payload."""

    title: str = Field(..., max_length=200)
    visibility: Visibility = Visibility.PUBLIC
    status: ProjectStatus = ProjectStatus.COMPLETED
    tags: List[str] = Field(default_factory=list, max_length=30)


class ProjectUpdate(ProjectBase):
    """Owner edit payload - all fields optional."""

    title: Optional[str] = Field(None, max_length=200)
    visibility: Optional[Visibility] = None
    status: Optional[ProjectStatus] = None
    tags: Optional[List[str]] = Field(None, max_length=30)


class ProfileBrief(BaseModel):
    """Owner of a project, always a single record."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    headline: Optional[str] = None


class ProjectSummary(BaseModel):
    """Row shape for listings."""

    id: uuid.UUID
    title: str
    slug: str
    short_desc: Optional[str] = None
    cover_image_url: Optional[str] = None
    category: Optional[str] = None
    status: ProjectStatus
    # Only populated for the owner
    visibility: Optional[Visibility] = None
    likes_count: int
    saves_count: int
    views_count: int
    tags: List[str] = []
    owner: ProfileBrief
    created_at: datetime


class ProjectView(ProjectSummary):
    """Full single-project projection."""

    profile_id: uuid.UUID
    full_desc: Optional[str] = None
    demo_video_url: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    updated_at: Optional[datetime] = None
    is_owner: bool = False


class Page(BaseModel, Generic[T]):
    """Offset-paginated result."""

    items: List[T]
    total: int
    limit: int
    offset: int
    has_more: bool


class DirectoryFilter(BaseModel):
    """Directory query parameters."""

    category: Optional[str] = None
    tag: Optional[str] = None
    q: Optional[str] = Field(None, max_length=100)
    sort: SortOrder = SortOrder.recent
    limit: int = Field(24, ge=1, le=100)
    offset: int = Field(0, ge=0)

    @field_validator("category", "tag", "q")
    @classmethod
    def empty_string_is_none(cls, v):
        return _blank_to_none(v)


class CategoryCount(BaseModel):
    category: str
    count: int


class ProfileAnalytics(BaseModel):
    """Totals across the owner's projects."""

    total_views: int = 0
    total_likes: int = 0
    total_saves: int = 0
    project_count: int = 0
