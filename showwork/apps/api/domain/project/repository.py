"""Project repository implementation."""

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, delete, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging import get_logger
from domain.engagement.models import ProjectLike, ProjectSave
from domain.skill.models import Skill, project_skills

from .models import Project, Visibility
from .schemas import DirectoryFilter, ProfileAnalytics, SortOrder

logger = get_logger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# Each sort ends on id so offset pages never reorder between calls
_SORT_COLUMNS = {
    SortOrder.recent: (desc(Project.created_at), desc(Project.id)),
    SortOrder.popular: (
        desc(Project.likes_count),
        desc(Project.created_at),
        desc(Project.id),
    ),
    SortOrder.trending: (
        desc(Project.likes_count),
        desc(Project.views_count),
        desc(Project.created_at),
        desc(Project.id),
    ),
}


class ProjectRepository:
    """Repository for project reads and counter updates."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """Fetch a project regardless of visibility; callers must resolve access."""
        query = (
            select(Project)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def add(self, project: Project) -> None:
        self.session.add(project)

    async def list_public(
        self, filter_params: DirectoryFilter
    ) -> tuple[List[Project], int]:
        """PUBLIC projects matching the filter, plus the unpaged total."""
        conditions = [Project.visibility == Visibility.PUBLIC]

        if filter_params.category:
            conditions.append(Project.category == filter_params.category)

        if filter_params.tag:
            tagged = (
                select(project_skills.c.project_id)
                .join(Skill, Skill.id == project_skills.c.skill_id)
                .where(func.lower(Skill.name) == filter_params.tag.lower())
            )
            conditions.append(Project.id.in_(tagged))

        if filter_params.q:
            pattern = f"%{_escape_like(filter_params.q)}%"
            conditions.append(
                or_(
                    Project.title.ilike(pattern, escape="\\"),
                    Project.short_desc.ilike(pattern, escape="\\"),
                )
            )

        filter_clause = and_(*conditions)
        count_query = select(func.count()).select_from(Project).where(filter_clause)
        total = (await self.session.execute(count_query)).scalar() or 0

        query = (
            select(Project)
            .where(filter_clause)
            .order_by(*_SORT_COLUMNS[filter_params.sort])
            .limit(filter_params.limit)
            .offset(filter_params.offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def list_by_profile(
        self, profile_id: UUID, include_hidden: bool = False
    ) -> List[Project]:
        """A profile's projects, newest first. Hidden ones only on request."""
        query = select(Project).where(Project.profile_id == profile_id)
        if not include_hidden:
            query = query.where(Project.visibility == Visibility.PUBLIC)
        query = query.order_by(desc(Project.created_at), desc(Project.id))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_saved_by(self, profile_id: UUID) -> List[Project]:
        """Projects a profile has saved, most recent save first."""
        query = (
            select(Project)
            .join(ProjectSave, ProjectSave.project_id == Project.id)
            .where(ProjectSave.profile_id == profile_id)
            .order_by(desc(ProjectSave.created_at), desc(Project.id))
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def public_category_counts(self) -> dict[str, int]:
        query = (
            select(Project.category, func.count())
            .where(
                Project.visibility == Visibility.PUBLIC,
                Project.category.is_not(None),
            )
            .group_by(Project.category)
        )
        result = await self.session.execute(query)
        return {category: count for category, count in result.all()}

    async def totals_for_profile(self, profile_id: UUID) -> ProfileAnalytics:
        query = select(
            func.coalesce(func.sum(Project.views_count), 0),
            func.coalesce(func.sum(Project.likes_count), 0),
            func.coalesce(func.sum(Project.saves_count), 0),
            func.count(Project.id),
        ).where(Project.profile_id == profile_id)
        views, likes, saves, count = (await self.session.execute(query)).one()
        return ProfileAnalytics(
            total_views=views,
            total_likes=likes,
            total_saves=saves,
            project_count=count,
        )

    async def adjust_counter(
        self, project_id: UUID, column: str, delta: int
    ) -> Optional[int]:
        """Atomically add delta to a counter and return the stored value.

        Returns None when the project no longer exists.
        """
        counter = getattr(Project, column)
        await self.session.execute(
            update(Project)
            .where(Project.id == project_id)
            # keep updated_at for owner edits only
            .values({column: counter + delta, "updated_at": Project.updated_at})
            .execution_options(synchronize_session=False)
        )
        return await self.read_counter(project_id, column)

    async def read_counter(self, project_id: UUID, column: str) -> Optional[int]:
        counter = getattr(Project, column)
        result = await self.session.execute(
            select(counter).where(Project.id == project_id)
        )
        return result.scalar_one_or_none()

    async def delete_with_dependents(self, project_ids: Sequence[UUID]) -> None:
        """Delete projects and every engagement and tag row that points at them."""
        if not project_ids:
            return
        for model in (ProjectLike, ProjectSave):
            await self.session.execute(
                delete(model).where(model.project_id.in_(project_ids))
            )
        await self.session.execute(
            delete(project_skills).where(project_skills.c.project_id.in_(project_ids))
        )
        await self.session.execute(
            delete(Project)
            .where(Project.id.in_(project_ids))
            .execution_options(synchronize_session=False)
        )
        logger.info("projects_deleted", count=len(project_ids))
