"""Project lifecycle: resolve, create, edit, publish and delete."""

import re
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import ViewerContext
from core.database import transaction
from core.exceptions import (
    AuthenticationRequiredError,
    OwnershipViolationError,
    ValidationError,
)
from core.logging import get_logger
from domain.project.models import Project, ProjectStatus, Visibility
from domain.project.repository import ProjectRepository
from domain.project.schemas import (
    CATEGORIES,
    ProfileAnalytics,
    ProjectCreate,
    ProjectSummary,
    ProjectUpdate,
    ProjectView,
)
from domain.skill.models import Skill
from domain.skill.repository import SkillRepository
from services.visibility import ensure_readable, filter_readable_fields, summarize

logger = get_logger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'My App (v2)!' -> 'my-app-v2'."""
    slug = _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")
    return slug or "project"


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title", "Title is required")
    return cleaned


def _check_category(category: Optional[str]) -> None:
    if category is not None and category not in CATEGORIES:
        raise ValidationError("category", f"Unknown category '{category}'")


class ProjectService:
    """Owner-facing project operations.

    Ownership always comes from the viewer context, never from the payload.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.skills = SkillRepository(session)

    async def resolve_project(
        self, project_id: UUID, viewer: ViewerContext
    ) -> ProjectView:
        """Single-project read. Hidden and missing projects look the same."""
        project = await self.projects.get_by_id(project_id)
        project = ensure_readable(viewer.profile_id, project, project_id)
        return filter_readable_fields(viewer.profile_id, project)

    async def create_project(
        self, owner: ViewerContext, payload: ProjectCreate
    ) -> ProjectView:
        self._require(owner)
        title = _clean_title(payload.title)
        _check_category(payload.category)

        project = Project(
            profile_id=owner.profile_id,
            title=title,
            slug=slugify(title),
            short_desc=payload.short_desc,
            full_desc=payload.full_desc,
            cover_image_url=payload.cover_image_url,
            demo_video_url=payload.demo_video_url,
            github_url=payload.github_url,
            live_url=payload.live_url,
            visibility=payload.visibility,
            status=payload.status,
            category=payload.category,
            likes_count=0,
            saves_count=0,
            views_count=0,
        )

        async with transaction(self.session, "project create"):
            project.skills = await self._resolve_tags(payload.tags)
            self.projects.add(project)

        logger.info(
            "project_created",
            project_id=str(project.id),
            profile_id=str(owner.profile_id),
            visibility=project.visibility.value,
        )
        return await self.resolve_project(project.id, owner)

    async def update_project(
        self, owner: ViewerContext, project_id: UUID, patch: ProjectUpdate
    ) -> ProjectView:
        self._require(owner)
        project = await self._owned(owner, project_id)
        changes = patch.model_dump(exclude_unset=True)

        # Validate everything before touching the row
        title = None
        if changes.get("title") is not None:
            title = _clean_title(changes["title"])
        if "category" in changes:
            _check_category(changes["category"])

        async with transaction(self.session, "project update"):
            if title is not None:
                project.title = title
                project.slug = slugify(title)

            for field in (
                "short_desc",
                "full_desc",
                "cover_image_url",
                "demo_video_url",
                "github_url",
                "live_url",
                "category",
            ):
                if field in changes:
                    setattr(project, field, changes[field])

            # Non-nullable enums: an explicit null means "leave as is"
            if changes.get("visibility") is not None:
                project.visibility = Visibility(changes["visibility"])
            if changes.get("status") is not None:
                project.status = ProjectStatus(changes["status"])

            if changes.get("tags") is not None:
                project.skills = await self._resolve_tags(changes["tags"])
            project.updated_at = datetime.utcnow()

        logger.info("project_updated", project_id=str(project_id), fields=sorted(changes))
        return await self.resolve_project(project_id, owner)

    async def publish_project(self, owner: ViewerContext, project_id: UUID) -> ProjectView:
        """Make a draft or private project PUBLIC."""
        return await self.update_project(
            owner, project_id, ProjectUpdate(visibility=Visibility.PUBLIC)
        )

    async def delete_project(self, owner: ViewerContext, project_id: UUID) -> None:
        """Delete a project with its engagement records and tag links."""
        self._require(owner)
        await self._owned(owner, project_id)
        async with transaction(self.session, "project delete"):
            await self.projects.delete_with_dependents([project_id])
        logger.info(
            "project_deleted", project_id=str(project_id), profile_id=str(owner.profile_id)
        )

    async def list_my_projects(self, owner: ViewerContext) -> List[ProjectSummary]:
        """Dashboard listing: every project of the owner, hidden ones included."""
        self._require(owner)
        projects = await self.projects.list_by_profile(owner.profile_id, include_hidden=True)
        return [summarize(owner.profile_id, project) for project in projects]

    async def get_profile_analytics(self, owner: ViewerContext) -> ProfileAnalytics:
        self._require(owner)
        return await self.projects.totals_for_profile(owner.profile_id)

    # ---------- internals ----------

    @staticmethod
    def _require(viewer: ViewerContext) -> None:
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError()

    async def _owned(self, owner: ViewerContext, project_id: UUID) -> Project:
        """Load a project for mutation by its owner.

        A project the caller cannot even see is reported as missing; a visible
        project that belongs to someone else is an ownership violation.
        """
        project = ensure_readable(
            owner.profile_id, await self.projects.get_by_id(project_id), project_id
        )
        if project.profile_id != owner.profile_id:
            raise OwnershipViolationError("Project", project_id)
        return project

    async def _resolve_tags(self, names: List[str]) -> List[Skill]:
        skills, missing = await self.skills.resolve_names(names)
        # Curated vocabulary: unknown names are dropped, not created
        for name in missing:
            logger.info("tag_skipped", tag=name)
        return skills
