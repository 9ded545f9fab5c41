from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import SHARER_HEADER
from .db import SessionLocal
from .errors import ValidationError
from .pagination import make_page_request
from .repository import BookingRepository
from .schemas import BookingCreate, BookingOut, FinishedBooking, ItemBookingSummary
from .service import BookingService
from .states import parse_state

router = APIRouter(prefix="/bookings", tags=["Bookings"])


async def get_db():
    async with SessionLocal() as session:
        yield session


def get_service(request: Request, db: AsyncSession = Depends(get_db)) -> BookingService:
    state = request.app.state
    return BookingService(
        BookingRepository(db),
        state.users,
        state.items,
        clock=state.clock,
        locks=state.locks,
        publisher=state.publisher,
    )


def sharer_id(user_id: int | None = Header(default=None, alias=SHARER_HEADER)) -> int:
    if user_id is None:
        raise ValidationError(f"User ID is required in header: {SHARER_HEADER}")
    return user_id


@router.post("", response_model=BookingOut)
async def create_booking(
    data: BookingCreate,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.request_booking(data.item_id, data.start, data.end, user_id)


@router.get("/owner", response_model=list[BookingOut])
async def list_owner_bookings(
    state: str | None = None,
    from_: int | None = Query(default=None, alias="from"),
    size: int | None = None,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.list_for_owner(user_id, parse_state(state), make_page_request(from_, size))


@router.get("", response_model=list[BookingOut])
async def list_booker_bookings(
    state: str | None = None,
    from_: int | None = Query(default=None, alias="from"),
    size: int | None = None,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.list_for_booker(user_id, parse_state(state), make_page_request(from_, size))


@router.get("/items/{item_id}", response_model=list[BookingOut])
async def list_item_bookings(
    item_id: int,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.list_for_item(item_id, user_id)


@router.get("/items/{item_id}/summary", response_model=ItemBookingSummary)
async def item_booking_summary(
    item_id: int,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.item_summary(item_id, user_id)


@router.get("/items/{item_id}/finished", response_model=FinishedBooking)
async def item_finished_booking(
    item_id: int,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    finished = await service.has_finished_booking(item_id, user_id)
    return FinishedBooking(item_id=item_id, booker_id=user_id, finished=finished)


@router.patch("/{booking_id}", response_model=BookingOut)
async def decide_booking(
    booking_id: int,
    approved: bool = False,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.decide(booking_id, approved, user_id)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: int,
    user_id: int = Depends(sharer_id),
    service: BookingService = Depends(get_service),
):
    return await service.get_by_id(booking_id, user_id)
