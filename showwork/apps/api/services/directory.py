"""Read-side directory over projects, profiles and skills."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import ViewerContext
from core.exceptions import ProfileNotFoundError
from core.logging import get_logger
from domain.profile.models import Profile
from domain.profile.repository import ProfileRepository
from domain.project.repository import ProjectRepository
from domain.project.schemas import (
    CATEGORIES,
    CategoryCount,
    DirectoryFilter,
    Page,
    ProfileBrief,
    ProjectSummary,
)
from domain.skill.repository import SkillRepository
from domain.skill.schemas import SkillResponse
from services.visibility import summarize_readable

logger = get_logger(__name__)


class Directory:
    """Listing, filtering, sorting and pagination.

    Public listings filter on visibility in the query and run every row
    through the resolver again before it leaves.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.profiles = ProfileRepository(session)
        self.skills = SkillRepository(session)

    async def list_public_projects(self, filter_params: DirectoryFilter) -> Page[ProjectSummary]:
        rows, total = await self.projects.list_public(filter_params)
        # Anonymous resolution: public listings never carry owner-only fields
        items = summarize_readable(None, rows)
        if len(items) != len(rows):
            logger.warning(
                "directory_rows_dropped", dropped=len(rows) - len(items)
            )
        return Page[ProjectSummary](
            items=items,
            total=total,
            limit=filter_params.limit,
            offset=filter_params.offset,
            has_more=filter_params.offset + len(rows) < total,
        )

    async def get_profile(self, username: str) -> Profile:
        profile = await self.profiles.get_by_username(username)
        if profile is None:
            raise ProfileNotFoundError(username)
        return profile

    async def list_profile_projects(
        self, profile: Profile, viewer: ViewerContext
    ) -> List[ProjectSummary]:
        """Owner sees drafts and private projects; everyone else PUBLIC only."""
        is_owner = viewer.profile_id == profile.id
        projects = await self.projects.list_by_profile(profile.id, include_hidden=is_owner)
        return summarize_readable(viewer.profile_id, projects)

    async def category_counts(self) -> List[CategoryCount]:
        counts = await self.projects.public_category_counts()
        return [
            CategoryCount(category=category, count=counts.get(category, 0))
            for category in CATEGORIES
        ]

    async def search_profiles(self, term: str, limit: int = 10) -> List[ProfileBrief]:
        term = (term or "").strip()
        if not term:
            return []
        profiles = await self.profiles.search(term, limit=limit)
        return [ProfileBrief.model_validate(profile) for profile in profiles]

    async def list_skills(self, category: Optional[str] = None) -> List[SkillResponse]:
        skills = await self.skills.list_all(category)
        return [SkillResponse.model_validate(skill) for skill in skills]
