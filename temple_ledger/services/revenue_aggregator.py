"""Revenue Aggregator — read-only projections over tickets and payments.

Invariants:
    - Never writes and never takes row locks
    - Every projection is one SQL statement, so it sees one consistent state
    - Money totals are exact Decimals (integer SUM underneath, see db/types.Money)
    - Only Success payments count towards revenue; Pending and Failed never do

Design Decisions:
    - Computed on demand: no cached projection to invalidate
    - Takes a bare AsyncSession, not a UnitOfWork: it has nothing to commit
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from temple_ledger.core.domain_types import EntityKind, PaymentStatus, TempleId
from temple_ledger.core.errors import NotFoundError
from temple_ledger.models.payment import Payment
from temple_ledger.models.temple import Temple
from temple_ledger.models.ticket import Ticket
from temple_ledger.models.user import User

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class TempleRevenue:
    temple_name: str
    total: Decimal


@dataclass(frozen=True)
class TempleRevenueSummary:
    temple_id: TempleId
    temple_name: str
    location: str
    ticket_count: int
    paid_ticket_count: int
    total: Decimal


@dataclass(frozen=True)
class TicketReportRow:
    """One ticket joined with its user, temple and (optional) payment."""
    ticket_id: int
    user_name: str
    temple_name: str
    visit_date: date
    amount: Decimal | None
    status: PaymentStatus | None


class RevenueAggregator:
    """Per-temple revenue, payment counts and the joined ticket report."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def revenue_by_temple(self, temple_id: int) -> TempleRevenue:
        stmt = (
            select(Temple.name, func.sum(Payment.amount))
            .select_from(Temple)
            .outerjoin(Ticket, Ticket.temple_id == Temple.id)
            .outerjoin(Payment, _successful_payment_of_ticket())
            .where(Temple.id == temple_id)
            .group_by(Temple.id, Temple.name)
        )
        row = (await self._db.execute(stmt)).one_or_none()
        if row is None:
            raise NotFoundError(EntityKind.TEMPLE.value, temple_id)
        name, total = row
        return TempleRevenue(temple_name=name, total=total if total is not None else ZERO)

    async def revenue_summary(self) -> list[TempleRevenueSummary]:
        """Every temple with ticket count, paid-ticket count and Success total."""
        stmt = (
            select(
                Temple.id,
                Temple.name,
                Temple.location,
                func.count(distinct(Ticket.id)),
                func.count(Payment.id),
                func.sum(Payment.amount),
            )
            .select_from(Temple)
            .outerjoin(Ticket, Ticket.temple_id == Temple.id)
            .outerjoin(Payment, _successful_payment_of_ticket())
            .group_by(Temple.id, Temple.name, Temple.location)
            .order_by(Temple.id)
        )
        result = await self._db.execute(stmt)
        return [
            TempleRevenueSummary(
                temple_id=TempleId(temple_id),
                temple_name=name,
                location=location,
                ticket_count=ticket_count,
                paid_ticket_count=paid_count,
                total=total if total is not None else ZERO,
            )
            for temple_id, name, location, ticket_count, paid_count, total in result.all()
        ]

    async def payment_count(self) -> int:
        """All payment records, whatever their status."""
        return await self._db.scalar(select(func.count(Payment.id))) or 0

    async def payment_count_by_status(self) -> dict[PaymentStatus, int]:
        result = await self._db.execute(
            select(Payment.status, func.count(Payment.id)).group_by(Payment.status),
        )
        counts = {status: 0 for status in PaymentStatus}
        for status, count in result.all():
            counts[PaymentStatus(status)] = count
        return counts

    async def ticket_report(self) -> list[TicketReportRow]:
        """User x Ticket x Temple, left-joined to Payment, by visit date."""
        stmt = (
            select(
                Ticket.id,
                User.name.label("user_name"),
                Temple.name.label("temple_name"),
                Ticket.visit_date,
                Payment.amount,
                Payment.status,
            )
            .select_from(Ticket)
            .join(User, User.id == Ticket.user_id)
            .join(Temple, Temple.id == Ticket.temple_id)
            .outerjoin(Payment, Payment.ticket_id == Ticket.id)
            .order_by(Ticket.visit_date, Ticket.id)
        )
        result = await self._db.execute(stmt)
        return [
            TicketReportRow(
                ticket_id=ticket_id,
                user_name=user_name,
                temple_name=temple_name,
                visit_date=visit_date,
                amount=amount,
                status=PaymentStatus(status) if status is not None else None,
            )
            for ticket_id, user_name, temple_name, visit_date, amount, status in result.all()
        ]


def _successful_payment_of_ticket():
    return and_(
        Payment.ticket_id == Ticket.id,
        Payment.status == PaymentStatus.SUCCESS.value,
    )
