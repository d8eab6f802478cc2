"""Payment ORM — the monetary settlement bound 1:1 to a ticket.

Invariants:
    - ticket_id is UNIQUE: at most one payment per ticket
    - amount >= 0, stored as integer hundredths (db/types.Money)
    - status is one of Pending | Success | Failed; only Pending -> Success/Failed moves
      (enforced in core/enforce_payment_status.py, CHECK guards the value set)

Design Decisions:
    - status as String + CHECK over a native ENUM: portable across SQLite and PostgreSQL
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from temple_ledger.core.domain_types import PaymentStatus
from temple_ledger.db.base import Base
from temple_ledger.db.types import Money


class Payment(Base):
    """Payment entity — exclusively owned by its Ticket."""
    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("ticket_id", name="uq_payments_ticket_id"),
        CheckConstraint("amount >= 0", name="amount_non_negative"),
        CheckConstraint(
            "status IN ('Pending', 'Success', 'Failed')",
            name="status",
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id"), nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    mode: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PaymentStatus.PENDING.value,
    )

    ticket: Mapped["Ticket"] = relationship(
        "Ticket", back_populates="payment", lazy="raise",
    )

    @property
    def payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.status)
