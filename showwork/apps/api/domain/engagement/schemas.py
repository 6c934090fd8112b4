"""Engagement domain schemas."""

import uuid

from pydantic import BaseModel

from domain.engagement.models import EngagementKind


class EngagementResult(BaseModel):
    """Authoritative outcome of a like/save mutation.

    Clients render an optimistic state first and reconcile to this.
    """

    project_id: uuid.UUID
    kind: EngagementKind
    active: bool
    count: int


class EngagementState(BaseModel):
    """Viewer's current relationship to a project."""

    project_id: uuid.UUID
    liked: bool
    saved: bool
    likes_count: int
    saves_count: int
