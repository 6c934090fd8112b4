"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import ViewerContext, require_viewer
from core.database import get_session
from core.logging import get_logger
from domain.profile.schemas import (
    AccountResponse,
    LoginRequest,
    ProfileResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
)
from services.account_service import AccountService

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new account together with its public profile."""
    user = await AccountService(session).register(request)
    return AccountResponse(
        id=user.id,
        email=user.email,
        profile=ProfileResponse.model_validate(user.profile),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    service = AccountService(session)
    user = await service.authenticate(request.email, request.password)
    return service.issue_tokens(user.id)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    request: RefreshTokenRequest,
    session: AsyncSession = Depends(get_session),
):
    """Exchange a refresh token for a new token pair."""
    return await AccountService(session).refresh(request.refresh_token)


@router.get("/me", response_model=AccountResponse)
async def me(
    viewer: ViewerContext = Depends(require_viewer),
    session: AsyncSession = Depends(get_session),
):
    service = AccountService(session)
    user = await service.get_account(viewer)
    profile = await service.get_own_profile(viewer)
    return AccountResponse(
        id=user.id,
        email=user.email,
        profile=ProfileResponse.model_validate(profile),
    )
