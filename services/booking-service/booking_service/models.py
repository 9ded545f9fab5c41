from sqlalchemy import Column, Integer, DateTime, Enum, Index

from .db import Base
from .states import BookingStatus


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=False)

    status = Column(
        Enum(BookingStatus, name="booking_status", native_enum=False, length=16),
        nullable=False,
        index=True,
    )

    booker_id = Column(Integer, nullable=False, index=True)
    item_id = Column(Integer, nullable=False, index=True)
    # owner at booking time; decisions re-read ownership from the item service
    item_owner_id = Column(Integer, nullable=False, index=True)

    __table_args__ = (
        Index("ix_bookings_item_status_end", "item_id", "status", "end"),
    )

    def __repr__(self) -> str:
        return f"<Booking id={self.id} item={self.item_id} status={self.status.value if self.status else None}>"
