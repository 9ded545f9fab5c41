import logging
from dataclasses import dataclass

import httpx

from .breaker import CircuitBreaker, CircuitBreakerOpen
from .config import HTTP_TIMEOUT, SHARER_HEADER
from .errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str | None
    email: str | None


@dataclass(frozen=True)
class ItemRecord:
    id: int
    owner_id: int
    available: bool
    name: str | None = None


async def _call_with_breaker(
    breaker: CircuitBreaker | None,
    url: str,
    headers: dict,
    not_found: str,
    timeout: float,
) -> dict:
    if breaker is not None:
        try:
            await breaker.allow_request()
        except CircuitBreakerOpen as e:
            raise UpstreamError(str(e), status_code=503)

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, headers=headers)
    except httpx.TimeoutException:
        if breaker is not None:
            await breaker.record_failure()
        logger.warning("timeout calling %s", url)
        raise UpstreamError(f"Timeout calling upstream: {url}", status_code=504)
    except httpx.HTTPError as e:
        if breaker is not None:
            await breaker.record_failure()
        logger.warning("error calling %s: %s", url, e)
        raise UpstreamError(f"Bad gateway calling upstream: {url}")

    # 4xx is an answer, not an outage
    if resp.status_code >= 500:
        if breaker is not None:
            await breaker.record_failure()
        raise UpstreamError(f"Upstream {url} answered {resp.status_code}")
    if breaker is not None:
        await breaker.record_success()

    if resp.status_code == 404:
        raise NotFoundError(not_found)
    if resp.status_code >= 400:
        raise UpstreamError(f"Upstream {url} answered {resp.status_code}")
    return resp.json()


class HttpUserLookup:
    def __init__(
        self,
        base_url: str,
        breaker: CircuitBreaker | None = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.breaker = breaker
        self.timeout = timeout

    async def get(self, user_id: int) -> UserRecord:
        data = await _call_with_breaker(
            self.breaker,
            f"{self.base_url}/users/{user_id}",
            {},
            f"User with id#{user_id} does not exist",
            self.timeout,
        )
        return UserRecord(id=int(data["id"]), name=data.get("name"), email=data.get("email"))


class HttpItemLookup:
    def __init__(
        self,
        base_url: str,
        breaker: CircuitBreaker | None = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.breaker = breaker
        self.timeout = timeout

    async def get(self, item_id: int, requester_id: int) -> ItemRecord:
        data = await _call_with_breaker(
            self.breaker,
            f"{self.base_url}/items/{item_id}",
            {SHARER_HEADER: str(requester_id)},
            f"Item with id#{item_id} does not exist",
            self.timeout,
        )
        owner_id = data.get("owner_id", data.get("ownerId"))
        if owner_id is None or "id" not in data:
            logger.warning("item-service returned an item without id/owner: item_id=%s", item_id)
            raise UpstreamError(f"Malformed item-service response for item id#{item_id}")
        return ItemRecord(
            id=int(data["id"]),
            owner_id=int(owner_id),
            available=bool(data.get("available")),
            name=data.get("name"),
        )
