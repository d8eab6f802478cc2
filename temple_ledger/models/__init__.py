"""ORM Models — SQLAlchemy declarative models for all ledger entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Dependency order: users, temples -> tickets -> payments

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from temple_ledger.models.user import User  # noqa: F401
from temple_ledger.models.temple import Temple  # noqa: F401
from temple_ledger.models.ticket import Ticket  # noqa: F401
from temple_ledger.models.payment import Payment  # noqa: F401
