"""Order submission and tax-rate lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from chowhub.api import ApiClient, ApiError
from chowhub.cart import Cart, compute_totals_for_lines, format_amount
from chowhub.catalog import CatalogCache, CatalogError
from chowhub.config import DEFAULT_TAX_RATE_PERCENT

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]

BUSY = "busy"
EMPTY_CART = "empty_cart"


@dataclass(frozen=True)
class SubmitResult:
    ok: bool
    order: dict[str, Any] | None = None
    error: str | None = None


def _silent(level: str, message: str) -> None:
    return


async def fetch_tax_rate(api: ApiClient, restaurant_id: str) -> float:
    """Return the restaurant's tax rate as a fraction (13% -> 0.13)."""
    body = await api.get(f"/restaurant/{restaurant_id}")
    restaurant = body.get("restaurant") if isinstance(body, dict) else None
    percent = restaurant.get("taxRatePercent") if isinstance(restaurant, dict) else None
    try:
        value = float(percent)
    except (TypeError, ValueError):
        logger.info("Restaurant %s has no tax rate; using %s%%", restaurant_id, DEFAULT_TAX_RATE_PERCENT)
        value = float(DEFAULT_TAX_RATE_PERCENT)
    return value / 100


class CheckoutSubmitter:
    """Turns the cart into a persisted order, one submission at a time."""

    def __init__(
        self,
        api: ApiClient,
        cart: Cart,
        catalog: CatalogCache,
        notify: Notifier | None = None,
    ) -> None:
        self.api = api
        self.cart = cart
        self.catalog = catalog
        self.notify = notify or _silent
        self.comment = ""
        self.in_flight = False

    def build_payload(self, tax_rate: float) -> dict[str, Any]:
        lines = self.cart.line_items()
        # Totals come from the lines being sent, not from what the screen showed.
        totals = compute_totals_for_lines(lines, tax_rate)
        return {
            "orderLineItems": [line.to_payload() for line in lines],
            "subtotal": format_amount(totals.subtotal),
            "tax": format_amount(totals.tax),
            "total": format_amount(totals.total),
            "comment": self.comment,
        }

    async def submit(self, tax_rate: float) -> SubmitResult:
        if self.in_flight:
            logger.info("submit ignored: another submission is in flight")
            return SubmitResult(ok=False, error=BUSY)
        if self.cart.is_empty:
            return SubmitResult(ok=False, error=EMPTY_CART)

        self.in_flight = True
        try:
            sent = self.cart.quantities()
            payload = self.build_payload(tax_rate)
            logger.info("submitting order lines=%s total=%s", len(payload["orderLineItems"]), payload["total"])
            try:
                response = await self.api.post("/order/create-order", json=payload)
            except ApiError as exc:
                logger.error("order submission failed: %s", exc)
                self.notify("error", f"An error occurred while submitting the order: {exc}")
                return SubmitResult(ok=False, error=str(exc))

            if isinstance(response, dict) and response.get("error"):
                message = str(response["error"])
                logger.error("order rejected: %s", message)
                self.notify("error", f"Failed to submit order: {message}")
                return SubmitResult(ok=False, error=message)

            # Selections made while the request was pending stay in the cart.
            self.cart.subtract(sent)
            if self.comment == payload["comment"]:
                self.comment = ""
            self.notify("information", "Order has been successfully placed")
            logger.info("order placed")

            # Ingredient usage may have made items unavailable.
            try:
                await self.catalog.refresh()
            except CatalogError as exc:
                self.notify("warning", str(exc))
            return SubmitResult(ok=True, order=response if isinstance(response, dict) else None)
        finally:
            self.in_flight = False
