"""Accounts and profiles: registration, login, settings and deletion."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.auth import (
    ViewerContext,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from core.database import transaction
from core.exceptions import (
    AuthenticationRequiredError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    ProfileNotFoundError,
)
from core.logging import get_logger
from domain.engagement.repository import EngagementRepository
from domain.profile.models import Profile
from domain.profile.repository import ProfileRepository
from domain.profile.schemas import (
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    normalize_username,
)
from domain.project.models import Project
from domain.project.repository import ProjectRepository
from domain.user.models import User

settings = get_settings()
logger = get_logger(__name__)


class AccountService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.profiles = ProfileRepository(session)

    async def _email_taken(self, email: str) -> bool:
        result = await self.session.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def register(self, request: RegisterRequest) -> User:
        """Create an account and its profile together."""
        email = request.email.lower()
        if await self._email_taken(email):
            raise DuplicateResourceError("User", "email", email)
        if await self.profiles.username_taken(request.username):
            raise DuplicateResourceError("Profile", "username", request.username)

        user = User(email=email, hashed_password=hash_password(request.password))
        user.profile = Profile(
            username=request.username,
            full_name=request.full_name or request.username,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.session.rollback()
            if await self.profiles.username_taken(request.username):
                raise DuplicateResourceError("Profile", "username", request.username)
            raise DuplicateResourceError("User", "email", email)

        logger.info("user_registered", user_id=str(user.id), username=request.username)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        result = await self.session.execute(
            select(User).where(User.email == email.lower(), User.is_active == True)  # noqa: E712
        )
        user = result.scalar_one_or_none()
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        async with transaction(self.session, "login bookkeeping"):
            user.last_login_at = datetime.utcnow()
            user.login_count = (user.login_count or 0) + 1

        logger.info("user_logged_in", user_id=str(user.id))
        return user

    @staticmethod
    def issue_tokens(user_id: UUID) -> TokenResponse:
        token_data = {"sub": str(user_id)}
        return TokenResponse(
            access_token=create_access_token(token_data),
            refresh_token=create_refresh_token(token_data),
            expires_in=settings.jwt_expire_minutes * 60,
        )

    async def refresh(self, refresh_token: str) -> TokenResponse:
        payload = decode_token(refresh_token, expected_type="refresh")
        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise InvalidTokenError()
        result = await self.session.execute(
            select(User.id).where(User.id == user_id, User.is_active == True)  # noqa: E712
        )
        if result.first() is None:
            raise InvalidTokenError()
        return self.issue_tokens(user_id)

    async def get_account(self, viewer: ViewerContext) -> User:
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError()
        result = await self.session.execute(select(User).where(User.id == viewer.user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise AuthenticationRequiredError()
        return user

    async def get_own_profile(self, viewer: ViewerContext) -> Profile:
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError()
        profile = await self.profiles.get_by_id(viewer.profile_id)
        if profile is None:
            raise ProfileNotFoundError(viewer.profile_id)
        return profile

    async def is_username_available(self, username: str) -> bool:
        return not await self.profiles.username_taken(normalize_username(username))

    async def update_profile(self, viewer: ViewerContext, patch: ProfileUpdate) -> Profile:
        profile = await self.get_own_profile(viewer)
        changes = patch.model_dump(exclude_unset=True)

        username = changes.pop("username", None)
        if username and username != profile.username:
            if await self.profiles.username_taken(username, exclude_profile_id=profile.id):
                raise DuplicateResourceError("Profile", "username", username)
            profile.username = username

        for field, value in changes.items():
            if field == "open_to_work" and value is None:
                continue
            setattr(profile, field, value)
        profile.updated_at = datetime.utcnow()

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateResourceError("Profile", "username", username)

        logger.info("profile_updated", profile_id=str(profile.id), fields=sorted(changes))
        return profile

    async def delete_account(self, viewer: ViewerContext) -> None:
        """Delete the account, its profile and projects, and every engagement it made."""
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError()
        profile_id = viewer.profile_id

        async with transaction(self.session, "account delete"):
            own_projects = await self.session.execute(
                select(Project.id).where(Project.profile_id == profile_id)
            )
            project_ids = [row[0] for row in own_projects.all()]

            await ProjectRepository(self.session).delete_with_dependents(project_ids)
            await EngagementRepository(self.session).purge_profile(profile_id)
            await self.session.execute(
                delete(Profile)
                .where(Profile.id == profile_id)
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(User)
                .where(User.id == viewer.user_id)
                .execution_options(synchronize_session=False)
            )

        logger.info(
            "account_deleted",
            user_id=str(viewer.user_id),
            projects_removed=len(project_ids),
        )
