"""Active orders board."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from chowhub.api import ApiClient, ApiError
from chowhub.models import ActiveOrder

logger = logging.getLogger(__name__)

# (minutes elapsed upper bound, band name)
_AGE_BANDS: tuple[tuple[int, str], ...] = (
    (10, "green"),
    (20, "yellow"),
    (30, "orange"),
    (40, "red"),
)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def age_band(created_at: str, now: datetime | None = None) -> str:
    """Colour band for how long an order has been waiting."""
    now = now or datetime.now(timezone.utc)
    try:
        created = _parse_timestamp(created_at)
    except ValueError:
        logger.debug("unreadable order timestamp %r", created_at)
        return _AGE_BANDS[0][1]
    minutes = int((now - created).total_seconds() // 60)
    for limit, band in _AGE_BANDS:
        if minutes < limit:
            return band
    return "critical"


class ActiveOrders:
    """Orders waiting in the kitchen, reloaded after every status change."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.orders: list[ActiveOrder] = []

    async def load(self) -> list[ActiveOrder]:
        body = await self.api.get("/order/active")
        if isinstance(body, dict):
            body = body.get("orders", [])
        if not isinstance(body, list):
            raise ApiError("Malformed active orders response")
        self.orders = [ActiveOrder.from_payload(raw) for raw in body]
        logger.info("loaded %s active orders", len(self.orders))
        return self.orders

    async def complete(self, order_id: str) -> list[ActiveOrder]:
        await self.api.patch(f"/order/{order_id}/complete")
        logger.info("order %s marked fulfilled", order_id)
        return await self.load()

    async def cancel(self, order_id: str) -> list[ActiveOrder]:
        await self.api.patch(f"/order/{order_id}/cancel")
        logger.info("order %s cancelled", order_id)
        return await self.load()
