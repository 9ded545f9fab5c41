from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from .states import BookingStatus


def _naive(value: datetime | None) -> datetime | None:
    # bookings are stored in server-local wall time
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class BookingCreate(BaseModel):
    item_id: int
    start: datetime | None = None
    end: datetime | None = None

    @field_validator("start", "end")
    @classmethod
    def strip_tz(cls, value: datetime | None) -> datetime | None:
        return _naive(value)


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    start: datetime
    end: datetime
    status: BookingStatus
    booker_id: int
    item_id: int


class BookingShort(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booker_id: int
    start: datetime
    end: datetime


class ItemBookingSummary(BaseModel):
    item_id: int
    last_booking: BookingShort | None = None
    next_booking: BookingShort | None = None


class FinishedBooking(BaseModel):
    item_id: int
    booker_id: int
    finished: bool
