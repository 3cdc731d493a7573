"""
Tests for the active orders board.
"""

from datetime import datetime, timedelta, timezone

import pytest

from chowhub.api import ApiError
from chowhub.orders import ActiveOrders, age_band

ORDER = {
    "_id": "o1",
    "orderNumber": 3,
    "status": "in progress",
    "total": 28.82,
    "createdAt": "2026-10-19T12:00:00Z",
    "orderLineItems": [],
}


class TestActiveOrders:
    @pytest.mark.asyncio
    async def test_load(self, api, backend):
        backend.add("GET", "/order/active", body=[ORDER])

        orders = await ActiveOrders(api).load()

        assert [o.id for o in orders] == ["o1"]

    @pytest.mark.asyncio
    async def test_complete_reloads(self, api, backend):
        backend.add("GET", "/order/active", body=[ORDER])
        backend.add("PATCH", "/order/o1/complete", body={"message": "ok"})
        board = ActiveOrders(api)

        await board.complete("o1")

        assert backend.count("PATCH /order/o1/complete") == 1
        assert backend.count("GET /order/active") == 1

    @pytest.mark.asyncio
    async def test_cancel_failure_propagates(self, api, backend):
        backend.add("PATCH", "/order/o1/cancel", status=409, body={"error": "already fulfilled"})

        with pytest.raises(ApiError, match="already fulfilled"):
            await ActiveOrders(api).cancel("o1")

    @pytest.mark.asyncio
    async def test_malformed_response(self, api, backend):
        backend.add("GET", "/order/active", body={"orders": "nope"})

        with pytest.raises(ApiError):
            await ActiveOrders(api).load()


@pytest.mark.parametrize(
    "minute, band",
    [(5, "green"), (10, "yellow"), (25, "orange"), (39, "red"), (40, "critical"), (90, "critical")],
)
def test_age_band(minute, band):
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc) + timedelta(minutes=minute)

    assert age_band("2026-10-19T12:00:00Z", now) == band


def test_age_band_without_timestamp():
    assert age_band("") == "green"
