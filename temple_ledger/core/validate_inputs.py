"""Input Validation — pure normalizers for every caller-supplied field.

Invariants:
    - Every normalizer either returns the canonical value or raises InvalidArgumentError
    - Money leaves here as a Decimal with exactly 2 fractional digits, never a float
    - Validation runs before any write (services call these first)

Design Decisions:
    - Reject rather than round: an amount with 3+ fractional digits is a caller bug,
      silently rounding would change the money recorded
    - Floats rejected outright: Decimal(0.1) is not 0.10
"""

from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal, InvalidOperation

from temple_ledger.core.domain_types import Money, VisitDatePolicy
from temple_ledger.core.errors import InvalidArgumentError


CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999.99")
MAX_MODE_LENGTH: int = 30
MAX_NAME_LENGTH: int = 200
MAX_EMAIL_LENGTH: int = 254
MAX_PHONE_LENGTH: int = 20


def normalize_amount(value: "Decimal | int | str") -> Money:
    """Parse and check a payment amount: finite, >= 0, at most 2 decimals."""
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidArgumentError(
            f"Amount must be a Decimal, int or numeric string, got {type(value).__name__}",
            "amount",
        )
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidArgumentError(f"Amount {value!r} is not a number", "amount")

    if not amount.is_finite():
        raise InvalidArgumentError(f"Amount {value!r} is not finite", "amount")
    if amount < 0:
        raise InvalidArgumentError(f"Amount {amount} must be >= 0", "amount")
    if amount > MAX_AMOUNT:
        raise InvalidArgumentError(f"Amount {amount} exceeds {MAX_AMOUNT}", "amount")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise InvalidArgumentError(
            f"Amount {amount} has more than 2 decimal places", "amount",
        )
    return Money(quantized)


def normalize_mode(value: str) -> str:
    mode = (value or "").strip()
    if not mode:
        raise InvalidArgumentError("Payment mode is required", "mode")
    if len(mode) > MAX_MODE_LENGTH:
        raise InvalidArgumentError(
            f"Payment mode longer than {MAX_MODE_LENGTH} characters", "mode",
        )
    return mode


def normalize_text(value: str, field: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Strip and require a non-empty, bounded string (names, locations)."""
    text = (value or "").strip()
    if not text:
        raise InvalidArgumentError(f"{field} cannot be empty", field)
    if len(text) > max_length:
        raise InvalidArgumentError(
            f"{field} longer than {max_length} characters", field,
        )
    return text


def normalize_email(value: str | None) -> str | None:
    """Emails compare case-insensitively; blank means absent."""
    if value is None:
        return None
    email = value.strip().lower()
    if not email:
        return None
    if len(email) > MAX_EMAIL_LENGTH or "@" not in email.strip("@"):
        raise InvalidArgumentError(f"Invalid email {value!r}", "email")
    return email


def normalize_phone(value: str | None) -> str | None:
    if value is None:
        return None
    phone = value.strip()
    if not phone:
        return None
    if len(phone) > MAX_PHONE_LENGTH:
        raise InvalidArgumentError(
            f"Phone longer than {MAX_PHONE_LENGTH} characters", "phone",
        )
    return phone


def booking_day(booked_at: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar day of the booking instant in `tz`; naive timestamps are UTC."""
    if booked_at.tzinfo is None:
        booked_at = booked_at.replace(tzinfo=timezone.utc)
    return booked_at.astimezone(tz).date()


def check_visit_date(
    visit_date: date,
    booked_at: datetime,
    policy: VisitDatePolicy,
    tz: tzinfo = timezone.utc,
) -> date:
    """Apply the visit-date rule; NOT_BEFORE_BOOKING compares with booking_day(booked_at, tz)."""
    if isinstance(visit_date, datetime) or not isinstance(visit_date, date):
        raise InvalidArgumentError(
            f"visit_date must be a date, got {type(visit_date).__name__}",
            "visit_date",
        )
    if policy is not VisitDatePolicy.NOT_BEFORE_BOOKING:
        return visit_date
    booked_on = booking_day(booked_at, tz)
    if visit_date < booked_on:
        raise InvalidArgumentError(
            f"visit_date {visit_date.isoformat()} is before booking date "
            f"{booked_on.isoformat()}",
            "visit_date",
        )
    return visit_date
