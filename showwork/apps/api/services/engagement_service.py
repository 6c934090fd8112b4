"""Engagement ledger: likes and saves with denormalized counters."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.auth import ViewerContext
from core.exceptions import (
    AuthenticationRequiredError,
    ProjectNotFoundError,
    TransientStorageError,
)
from core.logging import LoggerMixin
from domain.engagement.models import COUNTER_COLUMNS, EngagementKind
from domain.engagement.repository import EngagementRepository
from domain.engagement.schemas import EngagementResult, EngagementState
from domain.project.repository import ProjectRepository
from domain.project.schemas import ProjectSummary
from services.visibility import ensure_readable, summarize_readable

settings = get_settings()


class EngagementLedger(LoggerMixin):
    """Applies like/save changes for one viewer.

    Each change is a single transaction: the record write and the atomic
    counter update commit together or not at all. A unique-key conflict means
    the same viewer raced us on the same pair; the transaction is rolled back
    and the change re-driven against the now-current state.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.records = EngagementRepository(session)

    # ---------- public operations ----------

    async def toggle_like(self, viewer: ViewerContext, project_id: UUID) -> EngagementResult:
        return await self._mutate(viewer, project_id, EngagementKind.LIKE, None)

    async def toggle_save(self, viewer: ViewerContext, project_id: UUID) -> EngagementResult:
        return await self._mutate(viewer, project_id, EngagementKind.SAVE, None)

    async def set_like(
        self, viewer: ViewerContext, project_id: UUID, active: bool
    ) -> EngagementResult:
        """Idempotently force the like state. Safe to re-drive after a timeout."""
        return await self._mutate(viewer, project_id, EngagementKind.LIKE, active)

    async def set_save(
        self, viewer: ViewerContext, project_id: UUID, active: bool
    ) -> EngagementResult:
        return await self._mutate(viewer, project_id, EngagementKind.SAVE, active)

    async def get_state(self, viewer: ViewerContext, project_id: UUID) -> EngagementState:
        """Current relationship, readable by anonymous viewers too."""
        project = ensure_readable(
            viewer.profile_id, await self.projects.get_by_id(project_id), project_id
        )
        liked = saved = False
        if viewer.is_authenticated:
            liked = await self.records.exists(
                EngagementKind.LIKE, viewer.profile_id, project_id
            )
            saved = await self.records.exists(
                EngagementKind.SAVE, viewer.profile_id, project_id
            )
        return EngagementState(
            project_id=project.id,
            liked=liked,
            saved=saved,
            likes_count=project.likes_count,
            saves_count=project.saves_count,
        )

    async def list_saved(self, viewer: ViewerContext) -> List[ProjectSummary]:
        """The viewer's saved projects that are still readable to them."""
        self._require(viewer)
        projects = await self.projects.list_saved_by(viewer.profile_id)
        return summarize_readable(viewer.profile_id, projects)

    # ---------- internals ----------

    @staticmethod
    def _require(viewer: ViewerContext) -> None:
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError()

    async def _mutate(
        self,
        viewer: ViewerContext,
        project_id: UUID,
        kind: EngagementKind,
        desired: Optional[bool],
    ) -> EngagementResult:
        self._require(viewer)

        for attempt in range(1, settings.toggle_max_attempts + 1):
            try:
                result = await self._apply(viewer, project_id, kind, desired)
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                self.log_warning(
                    "engagement_conflict",
                    kind=kind.value,
                    project_id=str(project_id),
                    attempt=attempt,
                )
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                self.logger.error(
                    "engagement_storage_failed",
                    kind=kind.value,
                    project_id=str(project_id),
                    error=str(e),
                )
                raise TransientStorageError(f"{kind.value} update", e.__class__.__name__) from e
            except Exception:
                await self.session.rollback()
                raise

            self.log_info(
                "engagement_applied",
                kind=kind.value,
                project_id=str(project_id),
                profile_id=str(viewer.profile_id),
                active=result.active,
                count=result.count,
            )
            return result

        raise TransientStorageError(f"{kind.value} update", "too many concurrent changes")

    async def _apply(
        self,
        viewer: ViewerContext,
        project_id: UUID,
        kind: EngagementKind,
        desired: Optional[bool],
    ) -> EngagementResult:
        """One attempt inside an open transaction. ``desired=None`` toggles."""
        ensure_readable(
            viewer.profile_id, await self.projects.get_by_id(project_id), project_id
        )
        profile_id = viewer.profile_id

        if desired is True:
            if await self.records.exists(kind, profile_id, project_id):
                return await self._result(project_id, kind, True, delta=0)
        else:
            # Conditional delete decides the direction of a toggle atomically
            if await self.records.remove(kind, profile_id, project_id):
                return await self._result(project_id, kind, False, delta=-1)
            if desired is False:
                return await self._result(project_id, kind, False, delta=0)

        await self.records.add(kind, profile_id, project_id)
        return await self._result(project_id, kind, True, delta=1)

    async def _result(
        self, project_id: UUID, kind: EngagementKind, active: bool, delta: int
    ) -> EngagementResult:
        column = COUNTER_COLUMNS[kind]
        if delta:
            count = await self.projects.adjust_counter(project_id, column, delta)
        else:
            count = await self.projects.read_counter(project_id, column)
        if count is None:
            raise ProjectNotFoundError(project_id)
        return EngagementResult(project_id=project_id, kind=kind, active=active, count=count)
