"""Service test fixtures — per-test SQLite database and wired ledger services.

Invariants:
    - Every test gets a fresh database file under tmp_path
    - Every UnitOfWork created through make_uow gets its own session/connection,
      so concurrent tests exercise real cross-session isolation
    - All services in one test share one RowLockRegistry, clock and audit sink,
      unless make_uow is handed its own registry (a second process)

Design Decisions:
    - File-backed SQLite over :memory:: an in-memory database is per-connection
      (or one shared connection), which would hide concurrency behaviour
"""

import pytest

import temple_ledger.models  # noqa: F401
from temple_ledger.db.base import Base
from temple_ledger.db.session import create_engine, create_session_factory
from temple_ledger.infrastructure.row_locks import RowLockRegistry
from temple_ledger.services.booking_ledger import BookingLedger
from temple_ledger.services.booking_orchestrator import BookingOrchestrator
from temple_ledger.services.identity_store import IdentityStore
from temple_ledger.services.payment_processor import PaymentProcessor
from temple_ledger.services.revenue_aggregator import RevenueAggregator
from temple_ledger.services.unit_of_work import UnitOfWork
from tests.fakes import VISIT_DATE, RecordingAuditSink, StepClock


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def locks():
    return RowLockRegistry()


@pytest.fixture
async def make_uow(test_session_factory, audit, locks):
    """Factory: a new UnitOfWork on its own session."""
    sessions = []

    def _make(
        lock_timeout_seconds: float = 2.0, audit_sink=None, registry=None,
    ) -> UnitOfWork:
        session = test_session_factory()
        sessions.append(session)
        return UnitOfWork(
            session, audit_sink or audit, locks if registry is None else registry,
            lock_timeout_seconds=lock_timeout_seconds,
        )

    yield _make
    for session in sessions:
        await session.close()


@pytest.fixture
def uow(make_uow):
    return make_uow()


@pytest.fixture
def store(uow):
    return IdentityStore(uow)


@pytest.fixture
def ledger(uow, clock):
    return BookingLedger(uow, clock)


@pytest.fixture
def processor(uow, clock):
    return PaymentProcessor(uow, clock)


@pytest.fixture
def aggregator(uow):
    return RevenueAggregator(uow.db)


@pytest.fixture
def orchestrator(uow, ledger, processor):
    return BookingOrchestrator(uow, ledger, processor, max_retries=2, retry_base_delay_ms=0)


@pytest.fixture
async def rama(store):
    return await store.create_user("Rama", "rama@gmail.com", "9876543210")


@pytest.fixture
async def tirupati(store):
    return await store.create_temple("Tirupati", "Tirupati")


@pytest.fixture
async def ticket(ledger, rama, tirupati):
    return await ledger.create_ticket(rama, tirupati, VISIT_DATE)

