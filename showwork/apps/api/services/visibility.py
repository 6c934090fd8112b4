"""Visibility resolution for projects.

Every function here is pure: given a viewer and an already-loaded project it
decides readability and builds the projection that may leave the API. Hidden
projects surface as ``ProjectNotFoundError`` so that a stranger can never tell
a DRAFT or PRIVATE project apart from one that does not exist.
"""

from typing import Iterable, List, Optional
from uuid import UUID

from core.exceptions import ProjectNotFoundError
from domain.project.models import Project, Visibility
from domain.project.schemas import ProfileBrief, ProjectSummary, ProjectView


def is_owner(viewer_profile_id: Optional[UUID], project: Project) -> bool:
    return viewer_profile_id is not None and viewer_profile_id == project.profile_id


def can_view(viewer_profile_id: Optional[UUID], project: Project) -> bool:
    """PUBLIC is world-readable; DRAFT and PRIVATE are owner-only."""
    if project.visibility == Visibility.PUBLIC:
        return True
    return is_owner(viewer_profile_id, project)


def ensure_readable(
    viewer_profile_id: Optional[UUID], project: Optional[Project], project_id: UUID
) -> Project:
    """Return the project when readable, otherwise raise not-found."""
    if project is None or not can_view(viewer_profile_id, project):
        raise ProjectNotFoundError(project_id)
    return project


def _summary_fields(project: Project, owner_view: bool) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "slug": project.slug,
        "short_desc": project.short_desc,
        "cover_image_url": project.cover_image_url,
        "category": project.category,
        "status": project.status,
        "visibility": project.visibility if owner_view else None,
        "likes_count": project.likes_count or 0,
        "saves_count": project.saves_count or 0,
        "views_count": project.views_count or 0,
        "tags": project.tag_names,
        "owner": ProfileBrief.model_validate(project.owner),
        "created_at": project.created_at,
    }


def filter_readable_fields(
    viewer_profile_id: Optional[UUID], project: Project
) -> ProjectView:
    """Full projection of a project for this viewer."""
    ensure_readable(viewer_profile_id, project, project.id)
    owner_view = is_owner(viewer_profile_id, project)
    return ProjectView(
        **_summary_fields(project, owner_view),
        profile_id=project.profile_id,
        full_desc=project.full_desc,
        demo_video_url=project.demo_video_url,
        github_url=project.github_url,
        live_url=project.live_url,
        updated_at=project.updated_at,
        is_owner=owner_view,
    )


def summarize(viewer_profile_id: Optional[UUID], project: Project) -> ProjectSummary:
    ensure_readable(viewer_profile_id, project, project.id)
    return ProjectSummary(**_summary_fields(project, is_owner(viewer_profile_id, project)))


def summarize_readable(
    viewer_profile_id: Optional[UUID], projects: Iterable[Project]
) -> List[ProjectSummary]:
    """Summaries of the rows this viewer may read; the rest are dropped silently."""
    return [
        summarize(viewer_profile_id, project)
        for project in projects
        if can_view(viewer_profile_id, project)
    ]
