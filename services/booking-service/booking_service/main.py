import logging

from fastapi import FastAPI

from .breaker import CircuitBreaker
from .clock import SystemClock
from .config import ITEM_SERVICE_URL, LOCK_TTL_SECONDS, USER_SERVICE_URL
from .db import engine
from .errors import register_error_handlers
from .locks import LocalItemLocks, RedisItemLocks
from .logging_config import configure_logging
from .lookups import HttpItemLookup, HttpUserLookup
from .publisher import publisher
from .redis_client import redis_client
from .routes import router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Booking Service")
app.include_router(router)
register_error_handlers(app)

if redis_client is not None:
    cb_user = CircuitBreaker("user-service", redis_client, failure_threshold=5, reset_timeout_seconds=10)
    cb_item = CircuitBreaker("item-service", redis_client, failure_threshold=5, reset_timeout_seconds=10)
    app.state.locks = RedisItemLocks(redis_client, ttl_seconds=LOCK_TTL_SECONDS)
else:
    cb_user = cb_item = None
    app.state.locks = LocalItemLocks()

app.state.users = HttpUserLookup(USER_SERVICE_URL, breaker=cb_user)
app.state.items = HttpItemLookup(ITEM_SERVICE_URL, breaker=cb_item)
app.state.clock = SystemClock()
app.state.publisher = publisher


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "booking-service",
        "events_enabled": publisher.enabled,
        "shared_locks": redis_client is not None,
    }


@app.on_event("startup")
async def startup():
    # never crash the service if RabbitMQ is temporarily unavailable
    try:
        await publisher.connect()
    except Exception as e:
        logger.warning("RabbitMQ connect failed at startup; continuing without events: %s", e)


@app.on_event("shutdown")
async def shutdown():
    try:
        await publisher.close()
    except Exception as e:
        logger.warning("publisher close failed: %s", e)
    if redis_client is not None:
        await redis_client.aclose()
    await engine.dispose()
