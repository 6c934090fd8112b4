"""Skill vocabulary endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from domain.skill.schemas import SkillResponse
from services.directory import Directory

router = APIRouter()


@router.get("", response_model=List[SkillResponse])
async def list_skills(
    category: Optional[str] = Query(None, max_length=50),
    session: AsyncSession = Depends(get_session),
):
    """Tags that can be attached to projects."""
    return await Directory(session).list_skills(category)
