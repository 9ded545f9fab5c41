import pytest

from booking_service import breaker as breaker_module
from booking_service.breaker import CircuitBreaker, CircuitBreakerOpen

from conftest import FakeRedis


@pytest.fixture
def redis():
    return FakeRedis()


@pytest.mark.asyncio
async def test_closed_by_default(redis):
    cb = CircuitBreaker("user-service", redis, failure_threshold=2)
    await cb.allow_request()


@pytest.mark.asyncio
async def test_opens_after_threshold(redis):
    cb = CircuitBreaker("user-service", redis, failure_threshold=2)

    await cb.record_failure()
    await cb.allow_request()
    await cb.record_failure()

    assert redis.data["cb:user-service:state"] == "OPEN"
    with pytest.raises(CircuitBreakerOpen):
        await cb.allow_request()


@pytest.mark.asyncio
async def test_half_open_after_timeout_then_closes_on_success(redis, monkeypatch):
    cb = CircuitBreaker("item-service", redis, failure_threshold=1, reset_timeout_seconds=10)
    monkeypatch.setattr(breaker_module.time, "time", lambda: 1000.0)
    await cb.record_failure()

    monkeypatch.setattr(breaker_module.time, "time", lambda: 1011.0)
    await cb.allow_request()
    assert redis.data["cb:item-service:state"] == "HALF_OPEN"

    await cb.record_success()
    assert redis.data["cb:item-service:state"] == "CLOSED"
    assert "cb:item-service:failures" not in redis.data


@pytest.mark.asyncio
async def test_failed_probe_reopens(redis, monkeypatch):
    cb = CircuitBreaker("item-service", redis, failure_threshold=1, reset_timeout_seconds=10)
    monkeypatch.setattr(breaker_module.time, "time", lambda: 1000.0)
    await cb.record_failure()
    monkeypatch.setattr(breaker_module.time, "time", lambda: 1011.0)
    await cb.allow_request()

    await cb.record_failure()

    assert redis.data["cb:item-service:state"] == "OPEN"
    assert redis.data["cb:item-service:opened_at"] == "1011.0"
