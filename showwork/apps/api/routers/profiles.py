"""Profile endpoints: settings, public pages and search."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import ViewerContext, get_viewer, require_viewer
from core.database import get_session
from core.exceptions import ValidationError
from domain.profile.schemas import (
    ProfileResponse,
    ProfileUpdate,
    UsernameAvailability,
    normalize_username,
)
from domain.project.schemas import ProfileBrief, ProjectSummary
from services.account_service import AccountService
from services.directory import Directory

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await AccountService(session).get_own_profile(viewer)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    patch: ProfileUpdate,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await AccountService(session).update_profile(viewer, patch)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    """Delete the account, its profile and projects, and its likes and saves."""
    await AccountService(session).delete_account(viewer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/check-username", response_model=UsernameAvailability)
async def check_username(
    username: str = Query(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
):
    try:
        normalized = normalize_username(username)
    except ValueError as e:
        raise ValidationError("username", str(e))
    available = await AccountService(session).is_username_available(normalized)
    return UsernameAvailability(username=normalized, available=available)


@router.get("/search", response_model=List[ProfileBrief])
async def search_profiles(
    q: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
):
    return await Directory(session).search_profiles(q, limit=limit)


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    session: AsyncSession = Depends(get_session),
):
    return await Directory(session).get_profile(username)


@router.get("/{username}/projects", response_model=List[ProjectSummary])
async def list_profile_projects(
    username: str,
    viewer: ViewerContext = Depends(get_viewer),
    session: AsyncSession = Depends(get_session),
):
    """Projects on a profile page. Owners also see their drafts and private work."""
    directory = Directory(session)
    profile = await directory.get_profile(username)
    return await directory.list_profile_projects(profile, viewer)
