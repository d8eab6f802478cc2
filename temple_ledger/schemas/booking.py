"""Booking Schemas — tickets, payments and book-and-pay at the API boundary.

Invariants:
    - Amounts travel as strings or numbers and are parsed to Decimal by the service
    - Payment status values are the DB values (Pending | Success | Failed)
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from temple_ledger.core.domain_types import PaymentStatus


class TicketCreate(BaseModel):
    user_id: int = Field(ge=1)
    temple_id: int = Field(ge=1)
    visit_date: date


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    temple_id: int
    visit_date: date
    booking_date: datetime


class PaymentCreate(BaseModel):
    ticket_id: int = Field(ge=1)
    amount: Decimal
    mode: str = Field(min_length=1, max_length=30)


class PaymentStatusUpdate(BaseModel):
    """Gateway callback body."""
    status: PaymentStatus


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int
    amount: Decimal
    mode: str
    status: PaymentStatus


class BookAndPayRequest(BaseModel):
    user_id: int = Field(ge=1)
    temple_id: int = Field(ge=1)
    visit_date: date
    amount: Decimal
    mode: str = Field(min_length=1, max_length=30)


class BookAndPayResponse(BaseModel):
    ticket_id: int
    payment_id: int
    status: PaymentStatus
