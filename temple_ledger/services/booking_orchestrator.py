"""Booking Orchestrator — atomic "book a ticket and record its payment".

Invariants:
    - Ticket and Pending payment commit together or not at all
    - Ticket is written first; the payment's uniqueness check depends on it
    - Payment amount and mode are validated before the ticket is written
    - A failed attempt leaves no ticket row and publishes no events
    - LedgerErrors surface unchanged; any other failure surfaces as
      TransactionAbortedError chained to the original exception

Design Decisions:
    - The transaction boundary is the unit of retry: only errors flagged retryable
      (lock timeouts, transient storage errors) are retried, each time in a fresh
      transaction after a full rollback
    - No retry when the caller already opened the transaction: the orchestrator
      would not own the rollback
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from temple_ledger.core.domain_types import PaymentId, PaymentStatus, TicketId
from temple_ledger.core.enforce_payment_status import INITIAL_STATUS
from temple_ledger.core.errors import LedgerError, TransactionAbortedError
from temple_ledger.core.validate_inputs import normalize_amount, normalize_mode
from temple_ledger.services.booking_ledger import BookingLedger
from temple_ledger.services.payment_processor import PaymentProcessor
from temple_ledger.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingResult:
    ticket_id: TicketId
    payment_id: PaymentId
    status: PaymentStatus = INITIAL_STATUS


class BookingOrchestrator:
    """Composes BookingLedger and PaymentProcessor in one transaction."""

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: BookingLedger,
        processor: PaymentProcessor,
        max_retries: int = 0,
        retry_base_delay_ms: int = 50,
    ):
        self._uow = uow
        self._ledger = ledger
        self._processor = processor
        self._max_retries = max(0, max_retries)
        self._retry_base_delay_ms = retry_base_delay_ms

    async def book_and_pay(
        self,
        user_id: int,
        temple_id: int,
        visit_date: date,
        amount: "Decimal | int | str",
        mode: str,
    ) -> BookingResult:
        amount = normalize_amount(amount)
        mode = normalize_mode(mode)

        max_attempts = 1 if self._uow.in_transaction else self._max_retries + 1
        attempt = 1
        while True:
            try:
                return await self._book_once(user_id, temple_id, visit_date, amount, mode)
            except LedgerError as e:
                if not e.retryable or attempt >= max_attempts:
                    raise
                delay_ms = self._retry_base_delay_ms * (2 ** (attempt - 1))
                logger.warning(
                    f"book_and_pay attempt {attempt} failed ({e.code}), retrying in {delay_ms}ms",
                    extra={"attempt": attempt, "error_code": e.code, "user_id": user_id},
                )
                await asyncio.sleep(delay_ms / 1000)
                attempt += 1

    async def _book_once(
        self,
        user_id: int,
        temple_id: int,
        visit_date: date,
        amount: Decimal,
        mode: str,
    ) -> BookingResult:
        try:
            async with self._uow.transaction():
                ticket_id = await self._ledger.create_ticket(user_id, temple_id, visit_date)
                payment_id = await self._processor.record_payment(ticket_id, amount, mode)
        except LedgerError as e:
            logger.warning(
                f"book_and_pay rolled back: {e.message}",
                extra={"error_code": e.code, "user_id": user_id, "temple_id": temple_id},
            )
            raise
        except Exception as e:
            logger.error(
                f"book_and_pay rolled back on unexpected error: {e}",
                extra={"user_id": user_id, "temple_id": temple_id},
                exc_info=True,
            )
            raise TransactionAbortedError("book_and_pay", e) from e

        logger.info(
            f"Booked ticket {ticket_id} with payment {payment_id}",
            extra={"ticket_id": ticket_id, "payment_id": payment_id},
        )
        return BookingResult(ticket_id=ticket_id, payment_id=payment_id)
