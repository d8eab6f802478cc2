"""Row Lock Registry — bounded, per-row asyncio locks for single-writer discipline.

Invariants:
    - At most one holder per (entity, id) key at a time
    - acquire() waits at most timeout_seconds, then raises LockTimeoutError
      having acquired nothing
    - Idle keys are dropped, so the registry does not grow with the ledger

Design Decisions:
    - In-process locks complement SELECT ... FOR UPDATE: SQLite has no row locks,
      and on PostgreSQL they keep same-process writers off the pool entirely
    - Locks are released by the UnitOfWork at transaction end, not by the caller
"""

import asyncio
import logging
from typing import Hashable

from temple_ledger.core.errors import LockTimeoutError

logger = logging.getLogger(__name__)

LockKey = tuple[str, Hashable]


class RowLockRegistry:
    """Process-wide map of (entity, id) -> asyncio.Lock with reference counting."""

    def __init__(self):
        self._locks: dict[LockKey, asyncio.Lock] = {}
        self._users: dict[LockKey, int] = {}

    async def acquire(self, key: LockKey, timeout_seconds: float) -> None:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await asyncio.wait_for(lock.acquire(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            self._forget(key)
            entity, entity_id = key
            logger.warning(
                f"Lock wait expired for {entity} {entity_id}",
                extra={"error_code": "TIMEOUT"},
            )
            raise LockTimeoutError(entity, entity_id, timeout_seconds)
        except BaseException:
            self._forget(key)
            raise

    def release(self, key: LockKey) -> None:
        lock = self._locks.get(key)
        if lock is None or not lock.locked():
            return
        lock.release()
        self._forget(key)

    def is_locked(self, key: LockKey) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def _forget(self, key: LockKey) -> None:
        remaining = self._users.get(key, 0) - 1
        if remaining <= 0:
            self._users.pop(key, None)
            self._locks.pop(key, None)
        else:
            self._users[key] = remaining
