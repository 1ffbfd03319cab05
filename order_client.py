"""
Order retrieval client

Talks to the order API with the caller's bearer token and turns every
failure into one of the typed errors in ``errors``. ``fetch_orders`` never
raises: it returns a ``FetchResult`` holding either the orders or the error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app_logger import get_logger
from errors import NotFound, StoreError, Unauthorized, Unavailable, UnknownError, ValidationFailed
from schemas import Order, Scope

logger = get_logger("order_client")

ENDPOINTS: Dict[str, str] = {
    "mine": "/api/order/my-orders",
    "all": "/api/order/list",
}
PROFILE_ENDPOINT = "/api/user/profile"

_orders_adapter = TypeAdapter(List[Order])


@dataclass
class OrderSnapshot:
    """Orders as of the last successful fetch."""

    orders: List[Order]
    scope: Scope
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ids(self) -> List[str]:
        return [o.id for o in self.orders]


@dataclass
class FetchResult:
    orders: Optional[List[Order]] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _message(resp: httpx.Response, default: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return default


def _raise_for_status(resp: httpx.Response) -> None:
    code = resp.status_code
    if code < 400:
        return
    if code in (401, 403):
        raise Unauthorized(_message(resp, "Not authorized, login again"))
    if code == 404:
        raise NotFound(_message(resp, "Not found"))
    if code in (400, 422):
        raise ValidationFailed(_message(resp, "Invalid request"))
    if code in (502, 503, 504):
        raise Unavailable(_message(resp, f"Order API unavailable ({code})"))
    raise UnknownError(_message(resp, f"Order API error ({code})"))


class OrderClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str],
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport
        self.last_snapshot: Optional[OrderSnapshot] = None

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "Accept": "application/json"}

    async def _get(self, path: str, payload_key: str) -> Any:
        """GET an enveloped resource and return ``data[payload_key]``."""
        if not self.token:
            raise Unauthorized("Not authorized, login again")

        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise Unavailable(f"Order API unreachable: {e}", cause=e) from e

        _raise_for_status(resp)
        try:
            data = resp.json()
        except ValueError as e:
            raise Unavailable("Order API returned invalid JSON", cause=e) from e
        if not isinstance(data, dict):
            raise Unavailable("Order API returned an unexpected payload")

        if not data.get("success"):
            message = str(data.get("message") or "Request failed")
            if "authoriz" in message.lower():
                raise Unauthorized(message)
            raise UnknownError(message)
        if payload_key not in data:
            raise Unavailable(f"Order API response is missing '{payload_key}'")
        return data[payload_key]

    async def fetch_orders(self, scope: Scope = "mine") -> FetchResult:
        """Fetch the full, unfiltered order collection for ``scope``.

        On success ``last_snapshot`` is replaced; on failure it is left as is
        so the caller can keep showing it.
        """
        try:
            raw = await self._get(ENDPOINTS[scope], "orders")
            try:
                orders = _orders_adapter.validate_python(raw)
            except ValidationError as e:
                raise Unavailable(f"Order API returned malformed orders: {e.error_count()} errors", cause=e) from e
        except StoreError as e:
            logger.warning("Fetching %s orders failed (%s): %s", scope, e.kind, e.message)
            return FetchResult(error=e)
        except Exception as e:
            logger.exception("Unexpected error fetching %s orders", scope)
            return FetchResult(error=UnknownError("Failed to fetch orders", cause=e))

        self.last_snapshot = OrderSnapshot(orders=orders, scope=scope)
        logger.debug("Fetched %d %s orders", len(orders), scope)
        return FetchResult(orders=orders)

    async def fetch_profile(self) -> Dict[str, Any]:
        profile = await self._get(PROFILE_ENDPOINT, "user")
        if not isinstance(profile, dict):
            raise Unavailable("Order API returned an unexpected profile")
        return profile
