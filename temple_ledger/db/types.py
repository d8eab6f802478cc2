"""Column Types — Money stored as integer minor units, surfaced as Decimal.

Invariants:
    - Python side is always Decimal quantized to 0.01 (or None)
    - DB side is always a BIGINT count of hundredths, so SUM() is exact on every backend

Design Decisions:
    - Integer cents over NUMERIC: SQLite has no native decimal and would sum floats
"""

from decimal import Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

from temple_ledger.core.validate_inputs import CENT


class Money(TypeDecorator):
    """Decimal amount persisted as integer hundredths."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int((Decimal(value) / CENT).to_integral_exact())

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(int(value)) * CENT).quantize(CENT)
