from enum import Enum
from typing import Union

from .errors import ValidationError


class BookingStatus(str, Enum):
    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class TemporalState(str, Enum):
    ALL = "ALL"
    PAST = "PAST"
    CURRENT = "CURRENT"
    FUTURE = "FUTURE"


BookingFilter = Union[TemporalState, BookingStatus]


def parse_state(raw: str | None) -> BookingFilter:
    """
    Resolve a raw `state` value into a filter.

    Temporal names win over status names; matching is exact (case-sensitive).
    A missing value means ALL.
    """
    if raw is None:
        return TemporalState.ALL

    if raw in TemporalState.__members__:
        return TemporalState[raw]
    if raw in BookingStatus.__members__:
        return BookingStatus[raw]

    raise ValidationError(f"Unknown state: {raw}")
