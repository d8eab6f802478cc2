"""Payment Processor — records the one payment a ticket may have and drives its status.

Invariants:
    - At most one payment per ticket: checked under the ticket's row lock, with
      uq_payments_ticket_id as the cross-process backstop (both -> DuplicateKeyError)
    - New payments start Pending; only Pending -> Success | Failed is allowed
    - Amount, mode and requested status are validated before any row is touched
    - A rejected transition leaves the stored status unchanged

Design Decisions:
    - set_status is the gateway-callback entry point; nothing here times out or
      retries a payment on its own
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from temple_ledger.core.boundary_protocols import Clock
from temple_ledger.core.domain_events import PaymentRecorded, PaymentStatusChanged
from temple_ledger.core.domain_types import (
    EntityKind, PaymentId, PaymentStatus, TicketId,
)
from temple_ledger.core.enforce_payment_status import (
    INITIAL_STATUS, check_transition, parse_status,
)
from temple_ledger.core.errors import (
    DuplicateKeyError, NotFoundError, ReferentialIntegrityError,
)
from temple_ledger.core.validate_inputs import normalize_amount, normalize_mode
from temple_ledger.models.payment import Payment
from temple_ledger.models.ticket import Ticket
from temple_ledger.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """Payment creation and the Pending -> Success/Failed state machine."""

    def __init__(self, uow: UnitOfWork, clock: Clock):
        self._uow = uow
        self._db = uow.db
        self._clock = clock

    async def record_payment(
        self, ticket_id: int, amount: "Decimal | int | str", mode: str,
    ) -> PaymentId:
        amount = normalize_amount(amount)
        mode = normalize_mode(mode)

        async with self._uow.transaction():
            await self._uow.lock(EntityKind.TICKET, ticket_id)
            ticket_exists = await self._db.scalar(
                select(Ticket.id).where(Ticket.id == ticket_id),
            )
            if ticket_exists is None:
                raise ReferentialIntegrityError(
                    EntityKind.TICKET.value, ticket_id, EntityKind.PAYMENT.value,
                )
            if await self._recorded_payment_id(ticket_id) is not None:
                raise DuplicateKeyError(
                    EntityKind.PAYMENT.value, "ticket_id", ticket_id,
                )

            payment = Payment(
                ticket_id=ticket_id,
                amount=amount,
                mode=mode,
                status=INITIAL_STATUS.value,
            )
            self._db.add(payment)
            try:
                await self._db.flush()
            except IntegrityError:
                logger.warning(
                    f"Concurrent payment insert lost for ticket {ticket_id}",
                    extra={"ticket_id": ticket_id, "error_code": "DUPLICATE_KEY"},
                )
                raise DuplicateKeyError(
                    EntityKind.PAYMENT.value, "ticket_id", ticket_id,
                )
            self._uow.emit(PaymentRecorded(
                payment_id=PaymentId(payment.id),
                ticket_id=TicketId(ticket_id),
                amount=amount,
                mode=mode,
                status=INITIAL_STATUS,
                recorded_at=self._clock.now(),
            ))

        logger.info(
            f"Payment {payment.id} recorded for ticket {ticket_id}: {amount} via {mode}",
            extra={"payment_id": payment.id, "ticket_id": ticket_id},
        )
        return PaymentId(payment.id)

    async def _recorded_payment_id(self, ticket_id: int) -> int | None:
        return await self._db.scalar(
            select(Payment.id).where(Payment.ticket_id == ticket_id),
        )

    async def set_status(
        self, payment_id: int, new_status: "PaymentStatus | str",
    ) -> Payment:
        requested = parse_status(new_status)

        async with self._uow.transaction():
            await self._uow.lock(EntityKind.PAYMENT, payment_id)
            payment = await self._db.scalar(
                select(Payment).where(Payment.id == payment_id)
                .with_for_update()
                .execution_options(populate_existing=True),
            )
            if payment is None:
                raise NotFoundError(EntityKind.PAYMENT.value, payment_id)
            current = payment.payment_status
            check_transition(PaymentId(payment_id), current, requested)

            payment.status = requested.value
            await self._db.flush()
            self._uow.emit(PaymentStatusChanged(
                payment_id=PaymentId(payment_id),
                ticket_id=TicketId(payment.ticket_id),
                previous_status=current,
                new_status=requested,
                changed_at=self._clock.now(),
            ))

        logger.info(
            f"Payment {payment_id} {current.value} -> {requested.value}",
            extra={"payment_id": payment_id, "ticket_id": payment.ticket_id},
        )
        return payment

    async def get_payment(self, payment_id: int) -> Payment:
        payment = await self._db.get(Payment, payment_id, populate_existing=True)
        if payment is None:
            raise NotFoundError(EntityKind.PAYMENT.value, payment_id)
        return payment

    async def payment_for_ticket(self, ticket_id: int) -> Payment | None:
        """The ticket's payment, or None while it has not been recorded."""
        return await self._db.scalar(
            select(Payment).where(Payment.ticket_id == ticket_id)
            .execution_options(populate_existing=True),
        )
