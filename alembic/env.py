"""Alembic environment — runs ledger migrations through an async engine.

The URL comes from Settings (DATABASE_URL / .env), so migrations and the
service always target the same database; alembic.ini only supplies logging.
SQLite runs in batch mode because it cannot ALTER most constraints in place.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

import temple_ledger.models  # noqa: F401  (fills Base.metadata)
from temple_ledger.config import get_settings
from temple_ledger.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _migration_options(url: str) -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def _run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_migration_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def _apply(connection, url: str) -> None:
    context.configure(connection=connection, **_migration_options(url))
    with context.begin_transaction():
        context.run_migrations()


async def _run_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_apply, url)
    finally:
        await engine.dispose()


database_url = get_settings().database_url
if context.is_offline_mode():
    _run_offline(database_url)
else:
    asyncio.run(_run_online(database_url))
