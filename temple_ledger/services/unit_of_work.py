"""Unit of Work — one AsyncSession, one reentrant transaction scope, deferred events.

Invariants:
    - Only the outermost transaction() commits; nested scopes join it
    - Any exception inside any scope rolls back the whole transaction, even if an
      outer scope swallowed it (the outer exit then raises TransactionAbortedError)
    - Row locks taken inside a transaction are held until it commits or rolls back
    - Domain events are published only after a successful commit; rollback discards them
    - A failing audit sink never affects a committed transaction
    - SQLAlchemy errors never leave a scope raw: they surface as DatabaseError,
      retryable when transient (OperationalError)

Design Decisions:
    - Reentrant scope over explicit begin/commit calls: every service write is atomic
      on its own, and the orchestrator composes two of them by opening the scope first
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Hashable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from temple_ledger.core.boundary_protocols import AuditSink
from temple_ledger.core.domain_events import DomainEvent
from temple_ledger.core.domain_types import EntityKind
from temple_ledger.core.errors import TransactionAbortedError
from temple_ledger.infrastructure.database import storage_error
from temple_ledger.infrastructure.row_locks import LockKey, RowLockRegistry

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Transaction scope shared by the services of one request."""

    def __init__(
        self,
        db: AsyncSession,
        audit_sink: AuditSink,
        locks: RowLockRegistry,
        lock_timeout_seconds: float = 5.0,
    ):
        self.db = db
        self._audit_sink = audit_sink
        self._locks = locks
        self.lock_timeout_seconds = lock_timeout_seconds
        self._depth = 0
        self._failed = False
        self._pending_events: list[DomainEvent] = []
        self._held_locks: list[LockKey] = []

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator["UnitOfWork", None]:
        """Open (or join) the transaction. Outermost exit commits or rolls back."""
        self._depth += 1
        outermost = self._depth == 1
        try:
            yield self
        except BaseException as e:
            self._failed = True
            self._depth -= 1
            if outermost:
                await self._abort()
            if isinstance(e, SQLAlchemyError):
                logger.warning(f"Storage error inside transaction: {e}")
                raise storage_error(e, "transaction") from e
            raise
        self._depth -= 1
        if not outermost:
            return
        if self._failed:
            await self._abort()
            raise TransactionAbortedError(
                "transaction",
                RuntimeError("a nested scope failed and its error was suppressed"),
            )
        await self._commit()

    async def lock(self, entity: EntityKind, entity_id: Hashable) -> None:
        """Take the row lock for (entity, id) until the transaction ends."""
        if not self.in_transaction:
            raise RuntimeError("Row locks can only be taken inside transaction()")
        key: LockKey = (entity.value, entity_id)
        if key in self._held_locks:
            return
        await self._locks.acquire(key, self.lock_timeout_seconds)
        self._held_locks.append(key)

    def emit(self, event: DomainEvent) -> None:
        """Queue an event for publication after commit."""
        if not self.in_transaction:
            raise RuntimeError("Events can only be emitted inside transaction()")
        self._pending_events.append(event)

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            await self._abort()
            raise storage_error(e, "commit") from e
        events = self._pending_events
        self._pending_events = []
        self._release_locks()
        self._failed = False
        for event in events:
            self._publish(event)

    async def _abort(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}", exc_info=True)
        finally:
            if self._pending_events:
                logger.info(
                    f"Discarded {len(self._pending_events)} event(s) from rolled-back transaction",
                )
            self._pending_events = []
            self._release_locks()
            self._failed = False

    def _release_locks(self) -> None:
        for key in reversed(self._held_locks):
            self._locks.release(key)
        self._held_locks = []

    def _publish(self, event: DomainEvent) -> None:
        try:
            self._audit_sink.publish(event)
        except Exception as e:
            logger.error(
                f"Audit sink failed for {event.event_type}: {e}",
                extra={"event_type": event.event_type},
                exc_info=True,
            )
