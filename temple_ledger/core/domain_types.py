"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, TempleId, TicketId, PaymentId wrap ints — ids are assigned by storage,
      start at 1 and never change once issued
    - Money is always a Decimal quantized to 2 places (see core/validate_inputs.py)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders, values match the DB column
"""

from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
TempleId = NewType("TempleId", int)
TicketId = NewType("TicketId", int)
PaymentId = NewType("PaymentId", int)


# ─── Value Types ─────────────────────────────────────────────────

Money = NewType("Money", Decimal)   # >= 0.00, exactly 2 fractional digits


# ─── Enums ───────────────────────────────────────────────────────

class PaymentStatus(str, Enum):
    """Payment lifecycle states — maps to DB `status` column."""
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class VisitDatePolicy(str, Enum):
    """Rule relating a ticket's visit date to its booking date.

    The booking date is the calendar day of the booking instant in the configured
    booking timezone (BOOKING_TIMEZONE, UTC by default), not the server's local day.
    """
    ANY = "any"
    NOT_BEFORE_BOOKING = "not_before_booking"


class EntityKind(str, Enum):
    """Entity names used in error context and row-lock keys."""
    USER = "User"
    TEMPLE = "Temple"
    TICKET = "Ticket"
    PAYMENT = "Payment"
