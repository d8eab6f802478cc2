"""Ticket ORM — a user's booking to visit a temple on a date.

Invariants:
    - user_id and temple_id reference existing rows (checked pre-flight and by FK)
    - booking_date is server-assigned from the injected clock, never caller-supplied
    - At most one Payment (payments.ticket_id is UNIQUE)
    - Tickets are never deleted by this service

Design Decisions:
    - Indexes on user_id and temple_id: both are hot query paths (tickets_by_user/temple)
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from temple_ledger.db.base import Base


class Ticket(Base):
    """Ticket entity — owned by one User, references one Temple."""
    __tablename__ = "tickets"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    temple_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("temples.id"), nullable=False, index=True,
    )
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="tickets", lazy="raise",
    )
    temple: Mapped["Temple"] = relationship(
        "Temple", back_populates="tickets", lazy="raise",
    )
    payment: Mapped["Payment | None"] = relationship(
        "Payment", back_populates="ticket", uselist=False, lazy="raise",
    )
