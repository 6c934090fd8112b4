"""Alembic environment configuration."""

import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

# Add API package root to path for top-level imports (config/core/domain).
project_root = Path(__file__).parent.parent
api_path = project_root / "apps" / "api"
sys.path.insert(0, str(api_path if api_path.exists() else project_root))

from config import get_settings
from core.database import Base

# Import model modules to register them with Base metadata.
from domain.engagement import models as engagement_models  # noqa: F401
from domain.profile import models as profile_models  # noqa: F401
from domain.project import models as project_models  # noqa: F401
from domain.skill import models as skill_models  # noqa: F401
from domain.user import models as user_models  # noqa: F401

settings = get_settings()

config = context.config

# Offline mode renders SQL without a DBAPI, so strip the async driver
config.set_main_option(
    "sqlalchemy.url",
    settings.database_url.replace("+asyncpg", "").replace("+aiosqlite", ""),
)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode using async engine."""
    configuration = config.get_section(config.config_ini_section)
    configuration["sqlalchemy.url"] = settings.database_url

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
