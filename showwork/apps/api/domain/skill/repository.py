"""Skill repository."""

from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Skill


class SkillRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve_names(self, names: Iterable[str]) -> tuple[List[Skill], List[str]]:
        """Match tag names to skills case-insensitively.

        Returns (skills in request order, names with no matching skill).
        """
        wanted: dict[str, str] = {}
        for name in names:
            cleaned = (name or "").strip()
            if cleaned and cleaned.lower() not in wanted:
                wanted[cleaned.lower()] = cleaned
        if not wanted:
            return [], []

        result = await self.session.execute(
            select(Skill).where(func.lower(Skill.name).in_(list(wanted)))
        )
        by_key = {skill.name.lower(): skill for skill in result.scalars().all()}

        skills = [by_key[key] for key in wanted if key in by_key]
        missing = [wanted[key] for key in wanted if key not in by_key]
        return skills, missing

    async def list_all(self, category: Optional[str] = None) -> List[Skill]:
        query = select(Skill)
        if category:
            query = query.where(Skill.category == category)
        result = await self.session.execute(query.order_by(Skill.name))
        return list(result.scalars().all())
