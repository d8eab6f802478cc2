"""API Dependencies — per-request UnitOfWork and service wiring.

Invariants:
    - One UnitOfWork per request, bound to the request's AsyncSession
    - Clock, row-lock registry and audit sink are process-wide singletons
      (booking dates stay monotonic and row locks are shared across requests)

Design Decisions:
    - Services built per request from settings: routes never construct them by hand
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from temple_ledger.config import get_settings
from temple_ledger.infrastructure.audit_sink import LoggingAuditSink
from temple_ledger.infrastructure.clock import MonotonicClock
from temple_ledger.infrastructure.database import get_db
from temple_ledger.infrastructure.row_locks import RowLockRegistry
from temple_ledger.services.booking_ledger import BookingLedger
from temple_ledger.services.booking_orchestrator import BookingOrchestrator
from temple_ledger.services.identity_store import IdentityStore
from temple_ledger.services.payment_processor import PaymentProcessor
from temple_ledger.services.revenue_aggregator import RevenueAggregator
from temple_ledger.services.unit_of_work import UnitOfWork

clock = MonotonicClock()
row_locks = RowLockRegistry()
audit_sink = LoggingAuditSink()


def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(
        db, audit_sink, row_locks,
        lock_timeout_seconds=get_settings().lock_timeout_seconds,
    )


def get_identity_store(uow: UnitOfWork = Depends(get_uow)) -> IdentityStore:
    return IdentityStore(uow)


def get_booking_ledger(uow: UnitOfWork = Depends(get_uow)) -> BookingLedger:
    settings = get_settings()
    return BookingLedger(
        uow, clock, settings.visit_date_policy, settings.booking_tzinfo,
    )


def get_payment_processor(uow: UnitOfWork = Depends(get_uow)) -> PaymentProcessor:
    return PaymentProcessor(uow, clock)


def get_booking_orchestrator(
    uow: UnitOfWork = Depends(get_uow),
    ledger: BookingLedger = Depends(get_booking_ledger),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> BookingOrchestrator:
    settings = get_settings()
    return BookingOrchestrator(
        uow, ledger, processor,
        max_retries=settings.max_transaction_retries,
        retry_base_delay_ms=settings.retry_base_delay_ms,
    )


def get_revenue_aggregator(db: AsyncSession = Depends(get_db)) -> RevenueAggregator:
    return RevenueAggregator(db)
