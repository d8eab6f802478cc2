"""Declarative Base — metadata shared by the four ledger tables.

Invariants:
    - Every model inherits from Base, so Base.metadata is the full schema
    - Constraint and index names follow NAMING_CONVENTION; migrations and the
      DuplicateKeyError mapping rely on uq_payments_ticket_id keeping its name
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
