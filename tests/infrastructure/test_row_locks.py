"""Row Lock Registry — bounded waits, exclusivity and cleanup."""

import asyncio

import pytest

from temple_ledger.core.errors import LockTimeoutError
from temple_ledger.infrastructure.row_locks import RowLockRegistry

KEY = ("Ticket", 1)


async def test_acquire_and_release():
    locks = RowLockRegistry()
    await locks.acquire(KEY, timeout_seconds=0.1)
    assert locks.is_locked(KEY)
    locks.release(KEY)
    assert not locks.is_locked(KEY)


async def test_second_acquire_times_out_while_held():
    locks = RowLockRegistry()
    await locks.acquire(KEY, timeout_seconds=0.1)
    with pytest.raises(LockTimeoutError) as exc_info:
        await locks.acquire(KEY, timeout_seconds=0.05)
    assert exc_info.value.context.entity == "Ticket"
    assert exc_info.value.context.entity_id == 1
    # the original holder is unaffected
    assert locks.is_locked(KEY)
    locks.release(KEY)


async def test_waiter_gets_lock_after_release():
    locks = RowLockRegistry()
    await locks.acquire(KEY, timeout_seconds=0.1)
    waiter = asyncio.create_task(locks.acquire(KEY, timeout_seconds=1.0))
    await asyncio.sleep(0)
    assert not waiter.done()
    locks.release(KEY)
    await waiter
    assert locks.is_locked(KEY)
    locks.release(KEY)
    assert not locks.is_locked(KEY)


async def test_distinct_keys_do_not_block_each_other():
    locks = RowLockRegistry()
    await locks.acquire(("Ticket", 1), timeout_seconds=0.1)
    await locks.acquire(("Ticket", 2), timeout_seconds=0.1)
    await locks.acquire(("Payment", 1), timeout_seconds=0.1)
    for key in [("Ticket", 1), ("Ticket", 2), ("Payment", 1)]:
        locks.release(key)


async def test_idle_keys_are_dropped():
    locks = RowLockRegistry()
    await locks.acquire(KEY, timeout_seconds=0.1)
    locks.release(KEY)
    assert locks._locks == {}
    assert locks._users == {}


def test_release_of_unknown_key_is_noop():
    RowLockRegistry().release(("Payment", 42))
