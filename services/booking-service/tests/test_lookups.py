import httpx
import pytest
import respx

from booking_service.breaker import CircuitBreaker
from booking_service.errors import ErrorKind, NotFoundError, UpstreamError
from booking_service.lookups import HttpItemLookup, HttpUserLookup, ItemRecord, UserRecord

from conftest import FakeRedis

USERS = "http://users.test"
ITEMS = "http://items.test"


@pytest.mark.asyncio
async def test_user_lookup():
    with respx.mock() as router:
        router.get(f"{USERS}/users/1").respond(200, json={"id": 1, "name": "Lora", "email": "lora@mail.com"})

        user = await HttpUserLookup(USERS).get(1)

    assert user == UserRecord(id=1, name="Lora", email="lora@mail.com")


@pytest.mark.asyncio
async def test_item_lookup_sends_requester_header():
    with respx.mock() as router:
        route = router.get(f"{ITEMS}/items/10").respond(
            200, json={"id": 10, "name": "Drill", "available": True, "ownerId": 1, "comments": []}
        )

        item = await HttpItemLookup(ITEMS + "/").get(10, 2)

    assert item == ItemRecord(id=10, owner_id=1, available=True, name="Drill")
    assert route.calls.last.request.headers["X-Sharer-User-Id"] == "2"


@pytest.mark.asyncio
async def test_item_lookup_snake_case_owner():
    with respx.mock() as router:
        router.get(f"{ITEMS}/items/10").respond(200, json={"id": 10, "available": False, "owner_id": 4})

        item = await HttpItemLookup(ITEMS).get(10, 2)

    assert item.owner_id == 4
    assert item.available is False


@pytest.mark.asyncio
async def test_missing_user_is_not_found():
    with respx.mock() as router:
        router.get(f"{USERS}/users/9").respond(404, json={"detail": "User not found"})

        with pytest.raises(NotFoundError) as exc:
            await HttpUserLookup(USERS).get(9)

    assert exc.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_server_error_counts_against_breaker():
    redis = FakeRedis()
    breaker = CircuitBreaker("item-service", redis, failure_threshold=1)

    with respx.mock() as router:
        router.get(f"{ITEMS}/items/10").respond(500)

        with pytest.raises(UpstreamError) as exc:
            await HttpItemLookup(ITEMS, breaker=breaker).get(10, 2)

    assert exc.value.status_code == 502
    assert redis.data["cb:item-service:state"] == "OPEN"


@pytest.mark.asyncio
async def test_open_breaker_short_circuits():
    redis = FakeRedis()
    breaker = CircuitBreaker("user-service", redis, failure_threshold=1)
    await breaker.open()

    with respx.mock(assert_all_called=False) as router:
        route = router.get(f"{USERS}/users/1").respond(200, json={"id": 1})

        with pytest.raises(UpstreamError) as exc:
            await HttpUserLookup(USERS, breaker=breaker).get(1)

    assert exc.value.status_code == 503
    assert not route.called


@pytest.mark.asyncio
async def test_timeout():
    with respx.mock() as router:
        router.get(f"{USERS}/users/1").mock(side_effect=httpx.ConnectTimeout)

        with pytest.raises(UpstreamError) as exc:
            await HttpUserLookup(USERS).get(1)

    assert exc.value.status_code == 504


@pytest.mark.asyncio
async def test_connection_error():
    with respx.mock() as router:
        router.get(f"{USERS}/users/1").mock(side_effect=httpx.ConnectError)

        with pytest.raises(UpstreamError) as exc:
            await HttpUserLookup(USERS).get(1)

    assert exc.value.status_code == 502


@pytest.mark.asyncio
async def test_item_without_owner_is_upstream_error():
    with respx.mock() as router:
        router.get(f"{ITEMS}/items/10").respond(200, json={"id": 10, "name": "Drill", "available": True})

        with pytest.raises(UpstreamError) as exc:
            await HttpItemLookup(ITEMS).get(10, 2)

    assert exc.value.status_code == 502
    assert exc.value.kind is ErrorKind.UPSTREAM
