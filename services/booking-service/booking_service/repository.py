from datetime import datetime

from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Booking
from .pagination import PageRequest
from .states import BookingFilter, BookingStatus, TemporalState


def filter_clauses(booking_filter: BookingFilter, now: datetime) -> list:
    if isinstance(booking_filter, BookingStatus):
        return [Booking.status == booking_filter]

    if booking_filter == TemporalState.PAST:
        return [Booking.end < now]
    if booking_filter == TemporalState.CURRENT:
        return [Booking.start < now, Booking.end > now]
    if booking_filter == TemporalState.FUTURE:
        return [Booking.start > now]
    return []


def _ordered(stmt, page: PageRequest | None):
    # start descending is the base order, paged or not
    stmt = stmt.order_by(Booking.start.desc(), Booking.id.desc())
    if page is not None:
        stmt = stmt.offset(page.offset).limit(page.size)
    return stmt


class BookingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, booking_id: int) -> Booking | None:
        return await self.db.get(Booking, booking_id)

    async def refresh(self, booking: Booking) -> Booking:
        await self.db.refresh(booking)
        return booking

    async def save(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.commit()
        await self.db.refresh(booking)
        return booking

    async def _all(self, stmt) -> list[Booking]:
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def find_by_booker(
        self,
        booker_id: int,
        booking_filter: BookingFilter,
        now: datetime,
        page: PageRequest | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.booker_id == booker_id,
            *filter_clauses(booking_filter, now),
        )
        return await self._all(_ordered(stmt, page))

    async def find_by_owner(
        self,
        owner_id: int,
        booking_filter: BookingFilter,
        now: datetime,
        page: PageRequest | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.item_owner_id == owner_id,
            *filter_clauses(booking_filter, now),
        )
        return await self._all(_ordered(stmt, page))

    async def find_by_item_and_owner(self, item_id: int, owner_id: int) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.item_id == item_id, Booking.item_owner_id == owner_id)
            .order_by(Booking.start, Booking.id)
        )
        return await self._all(stmt)

    async def find_by_item_status_end_after(
        self,
        item_id: int,
        status: BookingStatus,
        moment: datetime,
        exclude_id: int | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.item_id == item_id,
            Booking.status == status,
            Booking.end > moment,
        )
        if exclude_id is not None:
            stmt = stmt.where(Booking.id != exclude_id)
        return await self._all(stmt.order_by(Booking.start))

    async def find_last_approved(self, item_id: int, now: datetime) -> Booking | None:
        stmt = (
            select(Booking)
            .where(
                Booking.item_id == item_id,
                Booking.status == BookingStatus.APPROVED,
                Booking.start < now,
            )
            .order_by(Booking.start.desc(), Booking.id.desc())
            .limit(1)
        )
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def find_next_approved(self, item_id: int, now: datetime) -> Booking | None:
        stmt = (
            select(Booking)
            .where(
                Booking.item_id == item_id,
                Booking.status == BookingStatus.APPROVED,
                Booking.start > now,
            )
            .order_by(Booking.start, Booking.id)
            .limit(1)
        )
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def has_finished(self, item_id: int, booker_id: int, now: datetime) -> bool:
        stmt = select(
            exists().where(
                Booking.item_id == item_id,
                Booking.booker_id == booker_id,
                Booking.status == BookingStatus.APPROVED,
                Booking.end < now,
            )
        )
        res = await self.db.execute(stmt)
        return bool(res.scalar())
