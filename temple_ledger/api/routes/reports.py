"""Report Routes — read-only revenue and ticket projections.

Invariants:
    - GET only; nothing here takes a lock or writes
    - Data is returned as JSON rows, never rendered
"""

from fastapi import APIRouter, Depends

from temple_ledger.api.dependencies import get_revenue_aggregator
from temple_ledger.schemas.report import (
    PaymentCountResponse, TempleRevenueResponse, TempleRevenueSummaryResponse,
    TicketReportRowResponse,
)
from temple_ledger.services.revenue_aggregator import RevenueAggregator

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/revenue", response_model=list[TempleRevenueSummaryResponse])
async def revenue_summary(
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
):
    return await aggregator.revenue_summary()


@router.get("/revenue/{temple_id}", response_model=TempleRevenueResponse)
async def revenue_by_temple(
    temple_id: int,
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
):
    revenue = await aggregator.revenue_by_temple(temple_id)
    return TempleRevenueResponse(
        temple_id=temple_id,
        temple_name=revenue.temple_name,
        total=revenue.total,
    )


@router.get("/payments/count", response_model=PaymentCountResponse)
async def payment_count(
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
):
    return PaymentCountResponse(
        total=await aggregator.payment_count(),
        by_status=await aggregator.payment_count_by_status(),
    )


@router.get("/tickets", response_model=list[TicketReportRowResponse])
async def ticket_report(
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
):
    return await aggregator.ticket_report()
