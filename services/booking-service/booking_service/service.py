import logging
from datetime import datetime

from .clock import SystemClock
from .errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StateError,
    ValidationError,
)
from .events import (
    BOOKING_APPROVED,
    BOOKING_REJECTED,
    BOOKING_REQUESTED,
    booking_payload,
    build_event,
    to_json,
)
from .locks import LocalItemLocks
from .models import Booking
from .pagination import PageRequest
from .repository import BookingRepository
from .schemas import BookingOut, BookingShort, ItemBookingSummary
from .states import BookingFilter, BookingStatus, TemporalState

logger = logging.getLogger(__name__)


class BookingService:
    """
    Booking lifecycle: request, owner decision, visibility and history queries.

    Writes that depend on the set of approved bookings of an item (creating a
    booking, approving one) run under a per-item lock so the conflict check and
    the commit are not interleaved with another writer of the same item.
    """

    def __init__(
        self,
        repo: BookingRepository,
        users,
        items,
        clock=None,
        locks=None,
        publisher=None,
    ):
        self.repo = repo
        self.users = users
        self.items = items
        self.clock = clock or SystemClock()
        self.locks = locks or LocalItemLocks()
        self.publisher = publisher

    def _validate_dates(self, start: datetime | None, end: datetime | None) -> None:
        today = self.clock.today()

        if start is None:
            raise ValidationError("Booking start date is required")
        if end is None:
            raise ValidationError("Booking end date is required")
        if start.date() < today:
            raise ValidationError(f"Invalid booking start date: {start.isoformat()}")
        if end < start or end.date() < today:
            raise ValidationError(f"Invalid booking end date: {end.isoformat()}")

    async def _check_no_conflict(self, item_id: int, start: datetime, exclude_id: int | None = None) -> None:
        # only approved bookings still running past the requested start block it
        blocking = await self.repo.find_by_item_status_end_after(
            item_id, BookingStatus.APPROVED, start, exclude_id=exclude_id
        )
        if blocking:
            logger.warning(
                "booking conflict: item_id=%s start=%s blocked_by=%s",
                item_id,
                start.isoformat(),
                [b.id for b in blocking],
            )
            raise ConflictError(f"Item#{item_id} cannot be booked for this period")

    async def _publish(self, event_type: str, booking: Booking) -> None:
        if self.publisher is None:
            return
        event = build_event(event_type, booking_payload(booking))
        await self.publisher.publish(event_type, to_json(event))

    async def request_booking(
        self,
        item_id: int,
        start: datetime | None,
        end: datetime | None,
        booker_id: int,
    ) -> BookingOut:
        item = await self.items.get(item_id, booker_id)

        if item.owner_id == booker_id:
            raise ForbiddenError(f"Item#{item.id} cannot be booked by its owner")
        if not item.available:
            logger.warning("Attempt to book unavailable item with id: %s", item.id)
            raise StateError(f"Item#{item.id} is not available for booking")

        self._validate_dates(start, end)
        await self.users.get(booker_id)

        async with self.locks.hold(item.id):
            await self._check_no_conflict(item.id, start)
            booking = await self.repo.save(
                Booking(
                    start=start,
                    end=end,
                    status=BookingStatus.WAITING,
                    booker_id=booker_id,
                    item_id=item.id,
                    item_owner_id=item.owner_id,
                )
            )

        logger.info(
            "booking created: id=%s item_id=%s booker_id=%s",
            booking.id,
            booking.item_id,
            booking.booker_id,
        )
        await self._publish(BOOKING_REQUESTED, booking)
        return BookingOut.model_validate(booking)

    async def decide(self, booking_id: int, approved: bool, user_id: int) -> BookingOut:
        booking = await self.repo.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with id#{booking_id} does not exist")
        if booking.booker_id == user_id:
            raise ForbiddenError(f"No decision available for user with id#{user_id}")

        item = await self.items.get(booking.item_id, user_id)

        # not-owner and already-decided share one error
        def _check_decidable(b: Booking) -> None:
            if item.owner_id != user_id or b.status != BookingStatus.WAITING:
                raise ValidationError("Booking status cannot be updated")

        _check_decidable(booking)

        async with self.locks.hold(booking.item_id):
            booking = await self.repo.refresh(booking)
            _check_decidable(booking)
            if approved:
                await self._check_no_conflict(booking.item_id, booking.start, exclude_id=booking.id)
            booking.status = BookingStatus.APPROVED if approved else BookingStatus.REJECTED
            booking = await self.repo.save(booking)

        logger.info("booking %s: id=%s by owner_id=%s", booking.status.value, booking.id, user_id)
        await self._publish(BOOKING_APPROVED if approved else BOOKING_REJECTED, booking)
        return BookingOut.model_validate(booking)

    async def get_by_id(self, booking_id: int, user_id: int) -> BookingOut:
        booking = await self.repo.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with id#{booking_id} does not exist")

        if booking.booker_id != user_id:
            item = await self.items.get(booking.item_id, user_id)
            if item.owner_id != user_id:
                raise ForbiddenError(f"Booking with id#{booking_id} is not available to user id#{user_id}")

        return BookingOut.model_validate(booking)

    async def list_for_booker(
        self,
        booker_id: int,
        booking_filter: BookingFilter = TemporalState.ALL,
        page: PageRequest | None = None,
    ) -> list[BookingOut]:
        await self.users.get(booker_id)
        bookings = await self.repo.find_by_booker(booker_id, booking_filter, self.clock.now(), page)
        return [BookingOut.model_validate(b) for b in bookings]

    async def list_for_owner(
        self,
        owner_id: int,
        booking_filter: BookingFilter = TemporalState.ALL,
        page: PageRequest | None = None,
    ) -> list[BookingOut]:
        await self.users.get(owner_id)
        bookings = await self.repo.find_by_owner(owner_id, booking_filter, self.clock.now(), page)
        return [BookingOut.model_validate(b) for b in bookings]

    async def list_for_item(self, item_id: int, owner_id: int) -> list[BookingOut]:
        bookings = await self.repo.find_by_item_and_owner(item_id, owner_id)
        return [BookingOut.model_validate(b) for b in bookings]

    async def item_summary(self, item_id: int, owner_id: int) -> ItemBookingSummary:
        """Last and next approved booking of an item; only its owner gets them."""
        item = await self.items.get(item_id, owner_id)
        if item.owner_id != owner_id:
            return ItemBookingSummary(item_id=item_id)

        now = self.clock.now()
        last = await self.repo.find_last_approved(item_id, now)
        nxt = await self.repo.find_next_approved(item_id, now)
        return ItemBookingSummary(
            item_id=item_id,
            last_booking=BookingShort.model_validate(last) if last else None,
            next_booking=BookingShort.model_validate(nxt) if nxt else None,
        )

    async def has_finished_booking(self, item_id: int, booker_id: int) -> bool:
        return await self.repo.has_finished(item_id, booker_id, self.clock.now())
