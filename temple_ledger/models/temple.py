"""Temple ORM — a visitable temple referenced by tickets.

Invariants:
    - Referenced, never owned, by tickets
    - Created/renamed by identity administration only
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from temple_ledger.db.base import Base


class Temple(Base):
    """Temple reference entity."""
    __tablename__ = "temples"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)

    tickets: Mapped[list["Ticket"]] = relationship(
        "Ticket", back_populates="temple", lazy="raise",
    )
