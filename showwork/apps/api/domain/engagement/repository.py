"""Engagement record repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.project.models import Project

from .models import COUNTER_COLUMNS, RECORD_MODELS, EngagementKind


class EngagementRepository:
    """Row-level operations on like/save records.

    Nothing here commits; the ledger owns the transaction boundary.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(
        self, kind: EngagementKind, profile_id: UUID, project_id: UUID
    ) -> bool:
        model = RECORD_MODELS[kind]
        result = await self.session.execute(
            select(model.project_id).where(
                model.profile_id == profile_id, model.project_id == project_id
            )
        )
        return result.first() is not None

    async def remove(
        self, kind: EngagementKind, profile_id: UUID, project_id: UUID
    ) -> bool:
        """Delete the record if present. True when a row was removed."""
        model = RECORD_MODELS[kind]
        result = await self.session.execute(
            delete(model)
            .where(model.profile_id == profile_id, model.project_id == project_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def add(
        self, kind: EngagementKind, profile_id: UUID, project_id: UUID
    ) -> None:
        """Insert the record. A concurrent duplicate raises IntegrityError."""
        model = RECORD_MODELS[kind]
        await self.session.execute(
            insert(model).values(
                profile_id=profile_id,
                project_id=project_id,
                created_at=datetime.utcnow(),
            )
        )

    async def purge_profile(self, profile_id: UUID) -> None:
        """Remove every record a profile holds, decrementing the counters it fed."""
        for kind, model in RECORD_MODELS.items():
            column = COUNTER_COLUMNS[kind]
            counter = getattr(Project, column)
            engaged = select(model.project_id).where(model.profile_id == profile_id)
            await self.session.execute(
                update(Project)
                .where(Project.id.in_(engaged))
                .values({column: counter - 1, "updated_at": Project.updated_at})
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(model)
                .where(model.profile_id == profile_id)
                .execution_options(synchronize_session=False)
            )
