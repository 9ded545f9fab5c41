import json
import os

os.environ.setdefault("BOOKING_DB", "sqlite+aiosqlite:///:memory:")

from datetime import datetime

import pytest
import pytest_asyncio

from shared.database import create_all, get_engine, get_session

from booking_service.clock import FixedClock
from booking_service.errors import NotFoundError
from booking_service.locks import LocalItemLocks
from booking_service.lookups import ItemRecord, UserRecord
from booking_service.models import Booking
from booking_service.repository import BookingRepository
from booking_service.service import BookingService
from booking_service.states import BookingStatus

NOW = datetime(2024, 1, 5, 9, 0)

OWNER_ID = 1
BOOKER_ID = 2
STRANGER_ID = 3

ITEM_ID = 10
UNAVAILABLE_ITEM_ID = 11
BOOKERS_ITEM_ID = 12


class FakeUsers:
    def __init__(self, users):
        self.users = {u.id: u for u in users}

    async def get(self, user_id):
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User with id#{user_id} does not exist")
        return user


class FakeItems:
    def __init__(self, items):
        self.items = {i.id: i for i in items}
        self.calls = []

    async def get(self, item_id, requester_id):
        self.calls.append((item_id, requester_id))
        item = self.items.get(item_id)
        if item is None:
            raise NotFoundError(f"Item with id#{item_id} does not exist")
        return item


class RecordingPublisher:
    enabled = True

    def __init__(self):
        self.events = []

    async def publish(self, routing_key, message_body):
        self.events.append((routing_key, json.loads(message_body)))


class FakeRedis:
    """Enough of redis.asyncio for the circuit breaker."""

    def __init__(self):
        self.data = {}
        self.ttl = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        if ex is not None:
            self.ttl[key] = ex
        return True

    async def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

    async def expire(self, key, seconds):
        self.ttl[key] = seconds
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def pipeline(self):
        return _FakePipeline(self)


class _FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.ops = []

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self

        return queue

    async def execute(self):
        results = []
        for name, args, kwargs in self.ops:
            results.append(await getattr(self.redis, name)(*args, **kwargs))
        self.ops = []
        return results


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def users():
    return FakeUsers(
        [
            UserRecord(id=OWNER_ID, name="Lora", email="lora@mail.com"),
            UserRecord(id=BOOKER_ID, name="Max", email="max@mail.com"),
            UserRecord(id=STRANGER_ID, name="Kate", email="kate@mail.com"),
        ]
    )


@pytest.fixture
def items():
    return FakeItems(
        [
            ItemRecord(id=ITEM_ID, owner_id=OWNER_ID, available=True, name="Drill"),
            ItemRecord(id=UNAVAILABLE_ITEM_ID, owner_id=OWNER_ID, available=False, name="Ladder"),
            ItemRecord(id=BOOKERS_ITEM_ID, owner_id=BOOKER_ID, available=True, name="Tent"),
        ]
    )


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest_asyncio.fixture
async def db():
    engine = get_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)
    SessionLocal = get_session(engine)
    async with SessionLocal() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def repo(db):
    return BookingRepository(db)


@pytest.fixture
def service(repo, users, items, clock, publisher):
    return BookingService(repo, users, items, clock=clock, locks=LocalItemLocks(), publisher=publisher)


@pytest.fixture
def add_booking(repo):
    """Store a booking directly, bypassing request validation (e.g. for past dates)."""

    async def _add(
        start,
        end,
        status=BookingStatus.WAITING,
        booker_id=BOOKER_ID,
        item_id=ITEM_ID,
        owner_id=OWNER_ID,
    ):
        return await repo.save(
            Booking(
                start=start,
                end=end,
                status=status,
                booker_id=booker_id,
                item_id=item_id,
                item_owner_id=owner_id,
            )
        )

    return _add
