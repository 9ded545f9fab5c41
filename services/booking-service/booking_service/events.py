import json
import uuid
from datetime import datetime, timezone

BOOKING_REQUESTED = "booking.requested"
BOOKING_APPROVED = "booking.approved"
BOOKING_REJECTED = "booking.rejected"


def build_event(event_type: str, data: dict) -> dict:
    return {
        "event_id": str(uuid.uuid4()),
        "event_type": event_type,
        "occurred_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def booking_payload(booking) -> dict:
    return {
        "booking_id": booking.id,
        "item_id": booking.item_id,
        "item_owner_id": booking.item_owner_id,
        "booker_id": booking.booker_id,
        "start": booking.start.isoformat(),
        "end": booking.end.isoformat(),
        "status": booking.status.value,
    }


def to_json(event: dict) -> str:
    return json.dumps(event, separators=(",", ":"), ensure_ascii=False)
