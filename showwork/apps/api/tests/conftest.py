"""
Pytest configuration and fixtures for the test suite.
"""

import os
import tempfile
from datetime import datetime, timedelta
from functools import lru_cache
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

_TEST_DB = Path(tempfile.gettempdir()) / f"showwork-test-{os.getpid()}.db"

# Set test environment variables before importing the app
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-32chars-minimum"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["VIEW_DEDUP_BACKEND"] = "memory"
os.environ["LOG_FORMAT"] = "console"

from sqlalchemy import func, select  # noqa: E402

from core.auth import ViewerContext, create_access_token, hash_password  # noqa: E402
from core.database import async_session, drop_database, init_database  # noqa: E402
from domain.engagement.models import ProjectLike, ProjectSave  # noqa: E402
from domain.profile.models import Profile  # noqa: E402
from domain.project.models import Project, ProjectStatus, Visibility  # noqa: E402
from domain.skill.models import Skill  # noqa: E402
from domain.user.models import User  # noqa: E402
from services.project_service import slugify  # noqa: E402
from services.storage_service import LocalStorageProvider, set_storage_provider  # noqa: E402
from services.view_counter import InMemoryViewDedupStore, set_view_dedup_store  # noqa: E402

TEST_PASSWORD = "password123"


@lru_cache
def _password_hash() -> str:
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope="session", autouse=True)
def _remove_test_database():
    yield
    _TEST_DB.unlink(missing_ok=True)


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test."""
    await drop_database()
    await init_database()
    yield


@pytest.fixture(autouse=True)
def view_store():
    store = InMemoryViewDedupStore(ttl_seconds=3600)
    set_view_dedup_store(store)
    return store


@pytest.fixture(autouse=True)
def storage(tmp_path):
    provider = LocalStorageProvider(
        str(tmp_path / "uploads"), "http://testserver/api/v1/files/media"
    )
    set_storage_provider(provider)
    return provider


@pytest.fixture
async def session():
    async with async_session() as s:
        yield s


@pytest.fixture
def make_member():
    """Create an account + profile and return its viewer context."""

    async def _make(username: str, full_name: str = None) -> ViewerContext:
        async with async_session() as s:
            user = User(email=f"{username}@example.com", hashed_password=_password_hash())
            user.profile = Profile(username=username, full_name=full_name or username.title())
            s.add(user)
            await s.commit()
            return ViewerContext(user_id=user.id, profile_id=user.profile.id)

    return _make


@pytest.fixture
def make_skills():
    async def _make(*names: str, category: str = "language") -> None:
        async with async_session() as s:
            for name in names:
                s.add(Skill(name=name, category=category))
            await s.commit()

    return _make


@pytest.fixture
def make_project():
    """Insert a project directly, bypassing the owner service.

    ``age_minutes`` backdates created_at so ordering tests are deterministic.
    """

    async def _make(
        owner: ViewerContext,
        title: str = "Project",
        visibility: Visibility = Visibility.PUBLIC,
        tags: tuple = (),
        age_minutes: int = 0,
        **fields,
    ):
        async with async_session() as s:
            skills = []
            if tags:
                result = await s.execute(
                    select(Skill).where(func.lower(Skill.name).in_([t.lower() for t in tags]))
                )
                skills = list(result.scalars().all())
            created = datetime.utcnow() - timedelta(minutes=age_minutes)
            status = fields.pop("status", ProjectStatus.COMPLETED)
            project = Project(
                profile_id=owner.profile_id,
                title=title,
                slug=slugify(title),
                visibility=visibility,
                status=status,
                created_at=created,
                updated_at=created,
                **fields,
            )
            project.skills = skills
            s.add(project)
            await s.commit()
            return project.id

    return _make


@pytest.fixture
def ledger_snapshot():
    """Stored counters and actual record counts for one project."""

    async def _snapshot(project_id) -> dict:
        async with async_session() as s:
            project = (
                await s.execute(select(Project).where(Project.id == project_id))
            ).scalar_one()
            likes = (
                await s.execute(
                    select(func.count()).select_from(ProjectLike).where(ProjectLike.project_id == project_id)
                )
            ).scalar()
            saves = (
                await s.execute(
                    select(func.count()).select_from(ProjectSave).where(ProjectSave.project_id == project_id)
                )
            ).scalar()
            return {
                "likes_count": project.likes_count,
                "likes": likes,
                "saves_count": project.saves_count,
                "saves": saves,
                "views_count": project.views_count,
            }

    return _snapshot


@pytest.fixture
def auth_headers():
    def _headers(viewer: ViewerContext) -> dict:
        token = create_access_token({"sub": str(viewer.user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client():
    """
    Create a test client for the FastAPI application.
    """
    from main import app

    with TestClient(app) as test_client:
        yield test_client
