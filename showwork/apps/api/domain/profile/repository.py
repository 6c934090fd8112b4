"""Profile repository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Profile


class ProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, profile_id: UUID) -> Optional[Profile]:
        result = await self.session.execute(
            select(Profile).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[Profile]:
        result = await self.session.execute(
            select(Profile).where(Profile.username == username.strip().lower())
        )
        return result.scalar_one_or_none()

    async def username_taken(
        self, username: str, exclude_profile_id: Optional[UUID] = None
    ) -> bool:
        query = select(Profile.id).where(Profile.username == username)
        if exclude_profile_id is not None:
            query = query.where(Profile.id != exclude_profile_id)
        result = await self.session.execute(query)
        return result.first() is not None

    async def search(self, term: str, limit: int = 10) -> List[Profile]:
        """Case-insensitive match on username or display name."""
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        result = await self.session.execute(
            select(Profile)
            .where(
                or_(
                    Profile.username.ilike(pattern, escape="\\"),
                    Profile.full_name.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Profile.username)
            .limit(limit)
        )
        return list(result.scalars().all())
