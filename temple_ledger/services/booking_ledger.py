"""Booking Ledger — creates tickets and answers per-user / per-temple ticket queries.

Invariants:
    - A ticket is written only if its user and temple exist (ReferentialIntegrityError
      names the first missing one); the FK constraint is the storage backstop
    - booking_date comes from the injected clock, never from the caller
    - Creating a ticket never creates a payment
    - Query results are ordered by (booking_date, id) and fully materialized lists

Design Decisions:
    - Visit-date rule injected as VisitDatePolicy: the base rule accepts any date
    - The booking day is taken in an injected timezone (UTC by default), so the
      rule does not depend on the host clock's zone
"""

import logging
from datetime import date, timezone, tzinfo

from sqlalchemy import select

from temple_ledger.core.boundary_protocols import Clock
from temple_ledger.core.domain_events import TicketCreated
from temple_ledger.core.domain_types import (
    EntityKind, TempleId, TicketId, UserId, VisitDatePolicy,
)
from temple_ledger.core.errors import NotFoundError, ReferentialIntegrityError
from temple_ledger.core.validate_inputs import check_visit_date
from temple_ledger.models.temple import Temple
from temple_ledger.models.ticket import Ticket
from temple_ledger.models.user import User
from temple_ledger.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class BookingLedger:
    """Ticket creation and ticket queries."""

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        visit_date_policy: VisitDatePolicy = VisitDatePolicy.ANY,
        booking_timezone: tzinfo = timezone.utc,
    ):
        self._uow = uow
        self._db = uow.db
        self._clock = clock
        self._visit_date_policy = visit_date_policy
        self._booking_timezone = booking_timezone

    async def create_ticket(
        self, user_id: int, temple_id: int, visit_date: date,
    ) -> TicketId:
        booked_at = self._clock.now()
        visit_date = check_visit_date(
            visit_date, booked_at, self._visit_date_policy, self._booking_timezone,
        )

        async with self._uow.transaction():
            await self._require_parent(User, EntityKind.USER, user_id)
            await self._require_parent(Temple, EntityKind.TEMPLE, temple_id)
            ticket = Ticket(
                user_id=user_id,
                temple_id=temple_id,
                visit_date=visit_date,
                booking_date=booked_at,
            )
            self._db.add(ticket)
            await self._db.flush()
            self._uow.emit(TicketCreated(
                ticket_id=TicketId(ticket.id),
                user_id=UserId(user_id),
                temple_id=TempleId(temple_id),
                visit_date=visit_date,
                booking_date=booked_at,
            ))

        logger.info(
            f"Ticket {ticket.id} booked for {visit_date.isoformat()}",
            extra={"ticket_id": ticket.id, "user_id": user_id, "temple_id": temple_id},
        )
        return TicketId(ticket.id)

    async def get_ticket(self, ticket_id: int) -> Ticket:
        ticket = await self._db.get(Ticket, ticket_id, populate_existing=True)
        if ticket is None:
            raise NotFoundError(EntityKind.TICKET.value, ticket_id)
        return ticket

    async def tickets_by_user(self, user_id: int) -> list[Ticket]:
        return await self._tickets_where(Ticket.user_id == user_id)

    async def tickets_by_temple(self, temple_id: int) -> list[Ticket]:
        return await self._tickets_where(Ticket.temple_id == temple_id)

    async def _tickets_where(self, condition) -> list[Ticket]:
        result = await self._db.execute(
            select(Ticket)
            .where(condition)
            .order_by(Ticket.booking_date, Ticket.id)
            .execution_options(populate_existing=True),
        )
        return list(result.scalars().all())

    async def _require_parent(self, model, kind: EntityKind, entity_id: int) -> None:
        found = await self._db.scalar(select(model.id).where(model.id == entity_id))
        if found is None:
            raise ReferentialIntegrityError(
                kind.value, entity_id, EntityKind.TICKET.value,
            )
