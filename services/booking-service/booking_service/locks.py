import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.exceptions import LockError

from .errors import ConflictError

logger = logging.getLogger(__name__)


def _lock_key(item_id: int) -> str:
    return f"booking:item:{item_id}:mutex"


class LocalItemLocks:
    """One asyncio.Lock per item id; serializes booking writes inside a process.

    A lock lives only while some writer holds or waits for it.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, item_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(item_id, asyncio.Lock())
        self._holders[item_id] = self._holders.get(item_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[item_id] -= 1
            if not self._holders[item_id]:
                del self._holders[item_id]
                del self._locks[item_id]


class RedisItemLocks:
    """Item mutex shared by every instance through redis."""

    def __init__(self, redis_client, ttl_seconds: int = 30, blocking_timeout: float = 5.0):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.blocking_timeout = blocking_timeout

    @asynccontextmanager
    async def hold(self, item_id: int) -> AsyncIterator[None]:
        lock = self.redis.lock(
            _lock_key(item_id),
            timeout=self.ttl_seconds,
            blocking_timeout=self.blocking_timeout,
        )
        acquired = await lock.acquire()
        if not acquired:
            logger.warning("item lock busy: item_id=%s", item_id)
            raise ConflictError(f"Item#{item_id} is being booked right now, try again")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # ttl ran out before we finished
                logger.warning("item lock lost: item_id=%s: %s", item_id, e)
