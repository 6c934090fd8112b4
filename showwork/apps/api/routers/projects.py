"""Project endpoints: directory, owner lifecycle, likes, saves and views."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.auth import ViewerContext, get_viewer, require_viewer
from core.database import get_session
from core.middleware import get_view_session
from domain.engagement.schemas import EngagementResult, EngagementState
from domain.project.schemas import (
    CategoryCount,
    DirectoryFilter,
    Page,
    ProfileAnalytics,
    ProjectCreate,
    ProjectSummary,
    ProjectUpdate,
    ProjectView,
    SortOrder,
)
from services.directory import Directory
from services.engagement_service import EngagementLedger
from services.project_service import ProjectService
from services.view_counter import ViewCounter, ViewDedupStore, get_view_dedup_store

settings = get_settings()
router = APIRouter()


# ========== Directory ==========
@router.get("", response_model=Page[ProjectSummary])
async def list_projects(
    category: Optional[str] = Query(None, max_length=50),
    tag: Optional[str] = Query(None, max_length=100),
    q: Optional[str] = Query(None, max_length=100),
    sort: SortOrder = Query(SortOrder.recent),
    limit: int = Query(
        settings.directory_default_page_size, ge=1, le=settings.directory_max_page_size
    ),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """Explore page: PUBLIC projects only."""
    filter_params = DirectoryFilter(
        category=category, tag=tag, q=q, sort=sort, limit=limit, offset=offset
    )
    return await Directory(session).list_public_projects(filter_params)


@router.get("/categories", response_model=List[CategoryCount])
async def category_counts(session: AsyncSession = Depends(get_session)):
    return await Directory(session).category_counts()


# ========== Dashboard ==========
@router.get("/mine", response_model=List[ProjectSummary])
async def list_my_projects(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await ProjectService(session).list_my_projects(viewer)


@router.get("/saved", response_model=List[ProjectSummary])
async def list_saved_projects(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).list_saved(viewer)


@router.get("/analytics", response_model=ProfileAnalytics)
async def profile_analytics(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await ProjectService(session).get_profile_analytics(viewer)


# ========== Owner lifecycle ==========
@router.post("", response_model=ProjectView, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await ProjectService(session).create_project(viewer, payload)


@router.get("/{project_id}", response_model=ProjectView)
async def get_project(
    project_id: UUID,
    viewer: ViewerContext = Depends(get_viewer),
    session: AsyncSession = Depends(get_session),
):
    """Single project. Hidden and unknown projects both answer 404."""
    return await ProjectService(session).resolve_project(project_id, viewer)


@router.patch("/{project_id}", response_model=ProjectView)
async def update_project(
    project_id: UUID,
    patch: ProjectUpdate,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await ProjectService(session).update_project(viewer, project_id, patch)


@router.post("/{project_id}/publish", response_model=ProjectView)
async def publish_project(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await ProjectService(session).publish_project(viewer, project_id)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    await ProjectService(session).delete_project(viewer, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ========== Engagement ==========
@router.post("/{project_id}/like", response_model=EngagementResult)
async def toggle_like(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).toggle_like(viewer, project_id)


@router.put("/{project_id}/like", response_model=EngagementResult)
async def like(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).set_like(viewer, project_id, True)


@router.delete("/{project_id}/like", response_model=EngagementResult)
async def unlike(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).set_like(viewer, project_id, False)


@router.post("/{project_id}/save", response_model=EngagementResult)
async def toggle_save(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).toggle_save(viewer, project_id)


@router.put("/{project_id}/save", response_model=EngagementResult)
async def save(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).set_save(viewer, project_id, True)


@router.delete("/{project_id}/save", response_model=EngagementResult)
async def unsave(
    project_id: UUID,
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    return await EngagementLedger(session).set_save(viewer, project_id, False)


@router.get("/{project_id}/engagement", response_model=EngagementState)
async def engagement_state(
    project_id: UUID,
    viewer: ViewerContext = Depends(get_viewer),
    session: AsyncSession = Depends(get_session),
):
    """Current like/save state, used by clients to reconcile after a timeout."""
    return await EngagementLedger(session).get_state(viewer, project_id)


@router.post("/{project_id}/views", status_code=status.HTTP_204_NO_CONTENT)
async def record_view(
    project_id: UUID,
    viewer: ViewerContext = Depends(get_viewer),
    view_session: str = Depends(get_view_session),
    store: ViewDedupStore = Depends(get_view_dedup_store),
    session: AsyncSession = Depends(get_session),
):
    """Count a view once per view session. Always 204, counted or not."""
    await ViewCounter(session, store).record_view(view_session, project_id, viewer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
