"""User ORM — a registered visitor who owns tickets.

Invariants:
    - id is an autoincrement integer, never reused
    - email is unique when present (NULLs never collide)
    - name is immutable after creation; email and phone are the only mutable fields

Design Decisions:
    - Tickets are not loaded eagerly: ledger queries select them explicitly with ordering
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from temple_ledger.db.base import Base


class User(Base):
    """Visitor identity referenced by tickets."""
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(
        String(254), nullable=True, unique=True,
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    tickets: Mapped[list["Ticket"]] = relationship(
        "Ticket", back_populates="user", lazy="raise",
    )
