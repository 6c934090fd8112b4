"""Database configuration and session management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from config import get_settings
from core.exceptions import TransientStorageError
from core.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)

# Determine if we're using SQLite (which doesn't support pool_size/max_overflow)
_is_sqlite = "sqlite" in settings.database_url.lower()

if _is_sqlite:
    _engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in settings.database_url:
        # One shared connection, otherwise every checkout sees an empty database
        _engine_kwargs["poolclass"] = StaticPool
    else:
        # A connection per session so concurrent writers take SQLite's file lock
        _engine_kwargs["poolclass"] = NullPool
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        **_engine_kwargs,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

else:
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
    )

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


def _import_models() -> None:
    """Import all models to register them with Base."""
    from domain.engagement import models as engagement_models  # noqa: F401
    from domain.profile import models as profile_models  # noqa: F401
    from domain.project import models as project_models  # noqa: F401
    from domain.skill import models as skill_models  # noqa: F401
    from domain.user import models as user_models  # noqa: F401


async def init_database() -> None:
    """Create tables if needed (dev and tests; production runs Alembic)."""
    _import_models()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise


async def drop_database() -> None:
    """Drop every table. Used by the test suite."""
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession, operation: str):
    """Commit the block as one unit.

    Any failure rolls the whole block back. Store failures are re-raised as
    TransientStorageError so callers know a retry is safe after re-fetching.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("storage_operation_failed", operation=operation, error=str(e))
        raise TransientStorageError(operation, e.__class__.__name__) from e
    except Exception:
        await session.rollback()
        raise
