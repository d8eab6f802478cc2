"""Booking Routes — tickets, payments, gateway status callback and book-and-pay.

Invariants:
    - POST /bookings is the only route that writes two entities, and it does so
      atomically through BookingOrchestrator
    - POST /payments/{id}/status is the payment gateway callback
"""

from fastapi import APIRouter, Depends, status

from temple_ledger.api.dependencies import (
    get_booking_ledger, get_booking_orchestrator, get_payment_processor,
)
from temple_ledger.schemas.booking import (
    BookAndPayRequest, BookAndPayResponse, PaymentCreate, PaymentResponse,
    PaymentStatusUpdate, TicketCreate, TicketResponse,
)
from temple_ledger.services.booking_ledger import BookingLedger
from temple_ledger.services.booking_orchestrator import BookingOrchestrator
from temple_ledger.services.payment_processor import PaymentProcessor

router = APIRouter(prefix="/api/v1", tags=["bookings"])


@router.post(
    "/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED,
)
async def create_ticket(
    body: TicketCreate, ledger: BookingLedger = Depends(get_booking_ledger),
):
    ticket_id = await ledger.create_ticket(body.user_id, body.temple_id, body.visit_date)
    return await ledger.get_ticket(ticket_id)


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: int, ledger: BookingLedger = Depends(get_booking_ledger),
):
    return await ledger.get_ticket(ticket_id)


@router.post(
    "/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    body: PaymentCreate,
    processor: PaymentProcessor = Depends(get_payment_processor),
):
    payment_id = await processor.record_payment(body.ticket_id, body.amount, body.mode)
    return await processor.get_payment(payment_id)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int, processor: PaymentProcessor = Depends(get_payment_processor),
):
    return await processor.get_payment(payment_id)


@router.post("/payments/{payment_id}/status", response_model=PaymentResponse)
async def set_payment_status(
    payment_id: int,
    body: PaymentStatusUpdate,
    processor: PaymentProcessor = Depends(get_payment_processor),
):
    return await processor.set_status(payment_id, body.status)


@router.post(
    "/bookings", response_model=BookAndPayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def book_and_pay(
    body: BookAndPayRequest,
    orchestrator: BookingOrchestrator = Depends(get_booking_orchestrator),
):
    result = await orchestrator.book_and_pay(
        body.user_id, body.temple_id, body.visit_date, body.amount, body.mode,
    )
    return BookAndPayResponse(
        ticket_id=result.ticket_id,
        payment_id=result.payment_id,
        status=result.status,
    )
