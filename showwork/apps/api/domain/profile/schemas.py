"""Profile and account schemas."""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-z0-9_-]{3,30}$")


def normalize_username(value: str) -> str:
    """Lowercase and validate a username."""
    value = (value or "").strip().lower()
    if not USERNAME_PATTERN.match(value):
        raise ValueError(
            "Username must be 3-30 characters of letters, digits, '_' or '-'"
        )
    return value


class RegisterRequest(BaseModel):
    """Registration request."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    username: str
    full_name: Optional[str] = Field(None, max_length=100)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return normalize_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        """Validate password strength."""
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class ProfileUpdate(BaseModel):
    """Settings form payload - all fields optional."""

    username: Optional[str] = None
    full_name: Optional[str] = Field(None, max_length=100)
    headline: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=5000)
    avatar_url: Optional[str] = Field(None, max_length=2000)
    github_url: Optional[str] = Field(None, max_length=2000)
    linkedin_url: Optional[str] = Field(None, max_length=2000)
    twitter_url: Optional[str] = Field(None, max_length=2000)
    website_url: Optional[str] = Field(None, max_length=2000)
    open_to_work: Optional[bool] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        if v is None:
            return v
        return normalize_username(v)


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    full_name: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    website_url: Optional[str] = None
    open_to_work: bool = False
    created_at: Optional[datetime] = None


class AccountResponse(BaseModel):
    """Account plus its profile."""

    id: uuid.UUID
    email: str
    profile: ProfileResponse


class UsernameAvailability(BaseModel):
    username: str
    available: bool
