"""Report Schemas — read-only projections returned by /reports."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from temple_ledger.core.domain_types import PaymentStatus


class TempleRevenueResponse(BaseModel):
    temple_id: int
    temple_name: str
    total: Decimal


class TempleRevenueSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    temple_id: int
    temple_name: str
    location: str
    ticket_count: int
    paid_ticket_count: int
    total: Decimal


class PaymentCountResponse(BaseModel):
    total: int
    by_status: dict[PaymentStatus, int]


class TicketReportRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticket_id: int
    user_name: str
    temple_name: str
    visit_date: date
    amount: Decimal | None
    status: PaymentStatus | None
