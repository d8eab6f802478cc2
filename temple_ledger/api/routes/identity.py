"""Identity Routes — users and temples.

Invariants:
    - Creation returns 201 with the stored representation
    - Unknown ids surface as 404 through the LedgerError handler
"""

from fastapi import APIRouter, Depends, status

from temple_ledger.api.dependencies import get_booking_ledger, get_identity_store
from temple_ledger.schemas.booking import TicketResponse
from temple_ledger.schemas.identity import (
    TempleCreate, TempleResponse, UserContactUpdate, UserCreate, UserResponse,
)
from temple_ledger.services.booking_ledger import BookingLedger
from temple_ledger.services.identity_store import IdentityStore

router = APIRouter(prefix="/api/v1", tags=["identity"])


@router.post(
    "/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate, store: IdentityStore = Depends(get_identity_store),
):
    user_id = await store.create_user(body.name, body.email, body.phone)
    return await store.get_user(user_id)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int, store: IdentityStore = Depends(get_identity_store),
):
    return await store.get_user(user_id)


@router.patch("/users/{user_id}/contact", response_model=UserResponse)
async def update_user_contact(
    user_id: int,
    body: UserContactUpdate,
    store: IdentityStore = Depends(get_identity_store),
):
    changes = {name: getattr(body, name) for name in body.model_fields_set}
    return await store.update_contact(user_id, **changes)


@router.get("/users/{user_id}/tickets", response_model=list[TicketResponse])
async def list_user_tickets(
    user_id: int,
    store: IdentityStore = Depends(get_identity_store),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    await store.get_user(user_id)
    return await ledger.tickets_by_user(user_id)


@router.post(
    "/temples", response_model=TempleResponse, status_code=status.HTTP_201_CREATED,
)
async def create_temple(
    body: TempleCreate, store: IdentityStore = Depends(get_identity_store),
):
    temple_id = await store.create_temple(body.name, body.location)
    return await store.get_temple(temple_id)


@router.get("/temples", response_model=list[TempleResponse])
async def list_temples(store: IdentityStore = Depends(get_identity_store)):
    return await store.list_temples()


@router.get("/temples/{temple_id}", response_model=TempleResponse)
async def get_temple(
    temple_id: int, store: IdentityStore = Depends(get_identity_store),
):
    return await store.get_temple(temple_id)


@router.get("/temples/{temple_id}/tickets", response_model=list[TicketResponse])
async def list_temple_tickets(
    temple_id: int,
    store: IdentityStore = Depends(get_identity_store),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    await store.get_temple(temple_id)
    return await ledger.tickets_by_temple(temple_id)
