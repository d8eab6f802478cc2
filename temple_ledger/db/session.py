"""Engine & Session Factory — builds async engines and sessions for app, scripts and tests.

Invariants:
    - SQLite connections always run with PRAGMA foreign_keys=ON
    - Sessions never expire attributes on commit (returned rows stay readable)

Design Decisions:
    - Separate from infrastructure/database.py: test fixtures and scripts need a raw
      engine/session factory without the request-scoped error mapping
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; SQLite gets foreign-key enforcement."""
    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
