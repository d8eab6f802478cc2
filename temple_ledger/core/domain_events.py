"""Domain Events — facts published to the audit collaborator after commit.

Invariants:
    - Events are immutable (frozen dataclasses)
    - Events are only published for committed transactions (see services/unit_of_work.py)
    - event_type is stable and dotted: "<aggregate>.<verb>"
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal

from temple_ledger.core.domain_types import (
    PaymentId, PaymentStatus, TempleId, TicketId, UserId,
)


@dataclass(frozen=True)
class TicketCreated:
    ticket_id: TicketId
    user_id: UserId
    temple_id: TempleId
    visit_date: date
    booking_date: datetime

    event_type = "ticket.created"

    @property
    def occurred_at(self) -> datetime:
        return self.booking_date


@dataclass(frozen=True)
class PaymentRecorded:
    payment_id: PaymentId
    ticket_id: TicketId
    amount: Decimal
    mode: str
    status: PaymentStatus
    recorded_at: datetime

    event_type = "payment.recorded"

    @property
    def occurred_at(self) -> datetime:
        return self.recorded_at


@dataclass(frozen=True)
class PaymentStatusChanged:
    payment_id: PaymentId
    ticket_id: TicketId
    previous_status: PaymentStatus
    new_status: PaymentStatus
    changed_at: datetime

    event_type = "payment.status_changed"

    @property
    def occurred_at(self) -> datetime:
        return self.changed_at


DomainEvent = TicketCreated | PaymentRecorded | PaymentStatusChanged


def event_payload(event: DomainEvent) -> dict:
    """JSON-safe dict for log sinks."""
    payload = {}
    for key, value in asdict(event).items():
        if isinstance(value, (date, datetime)):
            payload[key] = value.isoformat()
        elif isinstance(value, Decimal):
            payload[key] = str(value)
        elif isinstance(value, PaymentStatus):
            payload[key] = value.value
        else:
            payload[key] = value
    payload["event_type"] = event.event_type
    return payload
