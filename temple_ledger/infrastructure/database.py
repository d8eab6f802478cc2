"""Database Access — the process engine, request sessions and storage-error mapping.

Invariants:
    - A request session that sees a SQLAlchemy error is rolled back before the
      error leaves, and the error leaves as DatabaseError
    - Only OperationalError (lost connection, locked database) is transient
    - Driver messages never reach DatabaseError.message
    - db_manager is None outside the app lifespan

Design Decisions:
    - Pool sizing applies to server databases only; SQLite gets the dialect default
    - The manager owns no transaction: UnitOfWork commits, this layer only cleans up
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from temple_ledger.core.errors import DatabaseError
from temple_ledger.db.session import create_engine, create_session_factory

logger = logging.getLogger(__name__)

_SAFE_MESSAGES: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (IntegrityError, "Integrity constraint violated"),
    (OperationalError, "Connection or operational error"),
    (DBAPIError, "Database driver error"),
)


def storage_error(exc: SQLAlchemyError, operation: str) -> DatabaseError:
    """Translate a SQLAlchemy failure into a DatabaseError safe to return to clients."""
    for kind, message in _SAFE_MESSAGES:
        if isinstance(exc, kind):
            return DatabaseError(
                message, operation, transient=isinstance(exc, OperationalError),
            )
    return DatabaseError("Database operation failed", operation)


class DatabaseSessionManager:
    """Engine plus session factory for one database URL."""

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        engine_options = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_engine(database_url, **engine_options)
        self._session_factory = create_session_factory(self.engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as db:
            try:
                yield db
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    f"Session rolled back after {type(e).__name__}",
                    extra={"error_code": "DATABASE_ERROR"},
                )
                raise storage_error(e, "execute") from e

    async def health_check(self) -> bool:
        """True when the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Readiness check failed: {type(e).__name__}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session (FastAPI dependency)."""
    if db_manager is None:
        raise RuntimeError("init_db() has not run; start the app through its lifespan")
    async with db_manager.session() as db:
        yield db
