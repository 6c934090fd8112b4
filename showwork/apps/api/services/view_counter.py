"""Once-per-session view counting."""

import time
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.auth import ANONYMOUS, ViewerContext
from core.cache import get_redis_client
from core.cache_keys import view_seen_key
from core.database import transaction
from core.logging import get_logger
from domain.project.repository import ProjectRepository
from services.visibility import can_view

settings = get_settings()
logger = get_logger(__name__)


class ViewDedupStore(ABC):
    """Remembers which (session, project) pairs were already counted."""

    @abstractmethod
    async def claim(self, session_id: str, project_id: UUID) -> bool:
        """Mark the pair as seen. True only for the first claim."""
        pass

    @abstractmethod
    async def release(self, session_id: str, project_id: UUID) -> None:
        """Forget a claim whose increment did not happen."""
        pass


class RedisViewDedupStore(ViewDedupStore):
    """Claims shared by every API worker through Redis SET NX."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds

    async def claim(self, session_id: str, project_id: UUID) -> bool:
        client = get_redis_client()
        created = await client.set(
            view_seen_key(session_id, project_id), "1", nx=True, ex=self.ttl_seconds
        )
        return bool(created)

    async def release(self, session_id: str, project_id: UUID) -> None:
        await get_redis_client().delete(view_seen_key(session_id, project_id))


class InMemoryViewDedupStore(ViewDedupStore):
    """Process-local claims for single-worker development and tests."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds
        self._seen: dict[str, float] = {}

    async def claim(self, session_id: str, project_id: UUID) -> bool:
        key = view_seen_key(session_id, project_id)
        now = time.monotonic()
        expires_at = self._seen.get(key)
        if expires_at is not None and expires_at > now:
            return False
        self._seen[key] = now + self.ttl_seconds
        return True

    async def release(self, session_id: str, project_id: UUID) -> None:
        self._seen.pop(view_seen_key(session_id, project_id), None)

    def clear(self) -> None:
        self._seen.clear()


class ViewCounter:
    """Counts a view at most once per (view session, project)."""

    def __init__(self, session: AsyncSession, store: ViewDedupStore):
        self.session = session
        self.store = store
        self.projects = ProjectRepository(session)

    async def record_view(
        self,
        session_id: str,
        project_id: UUID,
        viewer: ViewerContext = ANONYMOUS,
    ) -> bool:
        """Returns True when this call incremented views_count."""
        if not session_id:
            return False

        project = await self.projects.get_by_id(project_id)
        if project is None or not can_view(viewer.profile_id, project):
            return False

        try:
            claimed = await self.store.claim(session_id, project_id)
        except RedisError as e:
            # Never risk a double count when claims cannot be checked
            logger.warning("view_dedup_unavailable", error=str(e))
            return False

        if not claimed:
            return False

        try:
            async with transaction(self.session, "view increment"):
                views = await self.projects.adjust_counter(project_id, "views_count", 1)
        except Exception:
            await self.store.release(session_id, project_id)
            raise

        logger.info("view_counted", project_id=str(project_id), views=views)
        return True


_view_dedup_store: Optional[ViewDedupStore] = None


def get_view_dedup_store() -> ViewDedupStore:
    """Get the dedup store singleton."""
    global _view_dedup_store
    if _view_dedup_store is None:
        if settings.view_dedup_backend == "memory":
            _view_dedup_store = InMemoryViewDedupStore(settings.view_session_ttl_seconds)
        else:
            _view_dedup_store = RedisViewDedupStore(settings.view_session_ttl_seconds)
    return _view_dedup_store


def set_view_dedup_store(store: ViewDedupStore) -> None:
    """Set a custom dedup store (for testing or alternative backends)."""
    global _view_dedup_store
    _view_dedup_store = store
