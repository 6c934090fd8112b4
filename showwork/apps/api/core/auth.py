"""Authentication utilities."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.database import get_session
from core.exceptions import AuthenticationRequiredError, InvalidTokenError
from core.logging import get_logger
from domain.profile.models import Profile
from domain.user.models import User

settings = get_settings()
logger = get_logger(__name__)

# JWT Bearer
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ViewerContext:
    """Who is making a request. Both ids are None for anonymous callers."""

    user_id: Optional[uuid.UUID] = None
    profile_id: Optional[uuid.UUID] = None

    @property
    def is_authenticated(self) -> bool:
        return self.profile_id is not None

    @classmethod
    def anonymous(cls) -> "ViewerContext":
        return cls()


ANONYMOUS = ViewerContext.anonymous()


def hash_password(password: str) -> str:
    """Hash a password."""
    password_bytes = password.encode("utf-8")
    # bcrypt only looks at the first 72 bytes
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    password_bytes = plain_password.encode("utf-8")
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def _encode(data: dict, token_type: str, expire: datetime) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    return _encode(data, "access", expire)


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token."""
    expire = datetime.utcnow() + timedelta(days=settings.jwt_refresh_expire_days)
    return _encode(data, "refresh", expire)


def decode_token(token: str, expected_type: str = "access") -> dict:
    """Decode a JWT token and check its type."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise InvalidTokenError()
    return payload


async def load_viewer(session: AsyncSession, user_id: uuid.UUID) -> ViewerContext:
    """Resolve an account id to a viewer context (anonymous if inactive)."""
    result = await session.execute(
        select(Profile.id)
        .join(User, User.id == Profile.user_id)
        .where(User.id == user_id, User.is_active == True)  # noqa: E712
    )
    profile_id = result.scalar_one_or_none()
    if profile_id is None:
        return ANONYMOUS
    return ViewerContext(user_id=user_id, profile_id=profile_id)


async def get_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> ViewerContext:
    """Current viewer, or anonymous. A bad token degrades to anonymous."""
    if credentials is None:
        return ANONYMOUS

    try:
        payload = decode_token(credentials.credentials)
        user_id = uuid.UUID(payload["sub"])
    except (InvalidTokenError, ValueError) as e:
        logger.debug("viewer_token_rejected", error=str(e))
        return ANONYMOUS

    return await load_viewer(session, user_id)


async def require_viewer(
    viewer: ViewerContext = Depends(get_viewer),
) -> ViewerContext:
    """Authenticated viewer; anonymous callers get a 401."""
    if not viewer.is_authenticated:
        raise AuthenticationRequiredError()
    return viewer
