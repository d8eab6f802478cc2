"""Booking Orchestrator — atomic book-and-pay.

Tests cover:
    - the happy path: ticket + Pending payment, then Success counts as revenue
    - a failing payment step rolls back the ticket and publishes nothing
    - non-ledger failures surface as TransactionAbortedError
    - invalid amount/mode rejected before the ticket is written
    - retryable failures are retried in a fresh transaction; others are not
    - transient storage errors (database is locked) are retried like lock timeouts
    - no retry when the caller owns the transaction
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from temple_ledger.core.domain_types import PaymentStatus
from temple_ledger.core.errors import (
    DatabaseError, DuplicateKeyError, InvalidArgumentError, LockTimeoutError,
    ReferentialIntegrityError, TransactionAbortedError,
)
from temple_ledger.models.payment import Payment
from temple_ledger.models.ticket import Ticket
from temple_ledger.services.booking_orchestrator import BookingOrchestrator
from tests.fakes import VISIT_DATE, count_rows


class FailingProcessor:
    """Payment step that always fails with the given exception."""

    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    async def record_payment(self, ticket_id, amount, mode):
        self.calls += 1
        raise self.exc


class FlakyProcessor:
    """Fails `failures` times (LockTimeoutError by default), then delegates."""

    def __init__(self, inner, failures: int, make_error=None):
        self.inner = inner
        self.failures = failures
        self.make_error = make_error or (lambda ticket_id: LockTimeoutError("Ticket", ticket_id, 0.05))
        self.calls = 0

    async def record_payment(self, ticket_id, amount, mode):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.make_error(ticket_id)
        return await self.inner.record_payment(ticket_id, amount, mode)


async def test_book_and_pay_then_success_counts_as_revenue(
    orchestrator, processor, aggregator, rama, tirupati,
):
    result = await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")
    assert (result.ticket_id, result.payment_id) == (1, 1)
    assert result.status is PaymentStatus.PENDING

    await processor.set_status(result.payment_id, PaymentStatus.SUCCESS)

    revenue = await aggregator.revenue_by_temple(tirupati)
    assert (revenue.temple_name, revenue.total) == ("Tirupati", Decimal("500.00"))
    assert await aggregator.payment_count() == 1


async def test_failed_payment_step_rolls_back_ticket(uow, ledger, audit, rama, tirupati):
    failing = FailingProcessor(DuplicateKeyError("Payment", "ticket_id", 1))
    orchestrator = BookingOrchestrator(uow, ledger, failing)
    audit.events.clear()

    with pytest.raises(DuplicateKeyError):
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert await count_rows(uow.db, Ticket) == 0
    assert await count_rows(uow.db, Payment) == 0
    assert audit.events == []


async def test_unexpected_failure_wrapped_as_transaction_aborted(uow, ledger, rama, tirupati):
    failing = FailingProcessor(RuntimeError("gateway exploded"))
    orchestrator = BookingOrchestrator(uow, ledger, failing)

    with pytest.raises(TransactionAbortedError) as exc_info:
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert await count_rows(uow.db, Ticket) == 0


async def test_missing_user_writes_nothing(orchestrator, uow, tirupati):
    with pytest.raises(ReferentialIntegrityError):
        await orchestrator.book_and_pay(999, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")
    assert await count_rows(uow.db, Ticket) == 0


@pytest.mark.parametrize("amount, mode", [(Decimal("-5"), "UPI"), (Decimal("5.00"), "")])
async def test_invalid_payment_rejected_before_ticket(
    orchestrator, uow, rama, tirupati, amount, mode,
):
    with pytest.raises(InvalidArgumentError):
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, amount, mode)
    assert await count_rows(uow.db, Ticket) == 0


async def test_retryable_failure_is_retried(uow, ledger, processor, rama, tirupati):
    flaky = FlakyProcessor(processor, failures=1)
    orchestrator = BookingOrchestrator(uow, ledger, flaky, max_retries=2, retry_base_delay_ms=0)

    result = await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert flaky.calls == 2
    assert await count_rows(uow.db, Ticket) == 1
    assert (await ledger.get_ticket(result.ticket_id)).user_id == rama


async def test_retries_are_bounded(uow, ledger, processor, rama, tirupati):
    flaky = FlakyProcessor(processor, failures=10)
    orchestrator = BookingOrchestrator(uow, ledger, flaky, max_retries=2, retry_base_delay_ms=0)

    with pytest.raises(LockTimeoutError):
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert flaky.calls == 3
    assert await count_rows(uow.db, Ticket) == 0


async def test_non_retryable_failure_not_retried(uow, ledger, rama, tirupati):
    failing = FailingProcessor(DuplicateKeyError("Payment", "ticket_id", 1))
    orchestrator = BookingOrchestrator(uow, ledger, failing, max_retries=3, retry_base_delay_ms=0)

    with pytest.raises(DuplicateKeyError):
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")
    assert failing.calls == 1


async def test_no_retry_inside_caller_transaction(uow, ledger, processor, rama, tirupati):
    flaky = FlakyProcessor(processor, failures=1)
    orchestrator = BookingOrchestrator(uow, ledger, flaky, max_retries=2, retry_base_delay_ms=0)

    with pytest.raises(LockTimeoutError):
        async with uow.transaction():
            await orchestrator.book_and_pay(
                rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI",
            )

    assert flaky.calls == 1
    assert await count_rows(uow.db, Ticket) == 0


async def test_events_published_in_order_after_commit(orchestrator, audit, rama, tirupati):
    audit.events.clear()
    await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")
    assert audit.types() == ["ticket.created", "payment.recorded"]


def database_locked(ticket_id):
    return OperationalError("INSERT INTO payments", {}, Exception("database is locked"))


async def test_transient_storage_error_is_retried(uow, ledger, processor, rama, tirupati):
    flaky = FlakyProcessor(processor, failures=1, make_error=database_locked)
    orchestrator = BookingOrchestrator(uow, ledger, flaky, max_retries=2, retry_base_delay_ms=0)

    result = await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert flaky.calls == 2
    assert result.status is PaymentStatus.PENDING
    assert await count_rows(uow.db, Ticket) == 1
    assert await count_rows(uow.db, Payment) == 1


async def test_persistent_storage_outage_surfaces_as_database_error(
    uow, ledger, processor, rama, tirupati,
):
    flaky = FlakyProcessor(processor, failures=10, make_error=database_locked)
    orchestrator = BookingOrchestrator(uow, ledger, flaky, max_retries=2, retry_base_delay_ms=0)

    with pytest.raises(DatabaseError) as exc_info:
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert exc_info.value.retryable
    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert flaky.calls == 3
    assert await count_rows(uow.db, Ticket) == 0


async def test_constraint_failure_not_retried(uow, ledger, rama, tirupati):
    failing = FailingProcessor(
        IntegrityError("INSERT INTO payments", {}, Exception("CHECK constraint failed")),
    )
    orchestrator = BookingOrchestrator(uow, ledger, failing, max_retries=3, retry_base_delay_ms=0)

    with pytest.raises(DatabaseError) as exc_info:
        await orchestrator.book_and_pay(rama, tirupati, VISIT_DATE, Decimal("500.00"), "UPI")

    assert not exc_info.value.retryable
    assert failing.calls == 1
    assert await count_rows(uow.db, Ticket) == 0
