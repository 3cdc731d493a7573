"""Shopping cart for a single checkout session."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Iterator

from chowhub.models import CartEntry, MenuItem, OrderLineItem, OrderTotals

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def format_amount(value: float) -> str:
    """Two-decimal string of ``value``, rounding halves up."""
    # repr() gives the shortest decimal that round-trips, so 28.815 stays 28.815.
    return str(Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def merge_entries(entries: Iterable[CartEntry]) -> list[CartEntry]:
    """Collapse entries sharing (item id, variant id), summing quantities.

    The first occurrence of each pair keeps its position.
    """
    merged: list[CartEntry] = []
    index_by_key: dict[tuple[str, str], int] = {}
    for entry in entries:
        existing = index_by_key.get(entry.key)
        if existing is None:
            index_by_key[entry.key] = len(merged)
            merged.append(CartEntry(item=entry.item, variant_id=entry.variant_id, quantity=entry.quantity))
        else:
            merged[existing].quantity += entry.quantity
    return merged


def compute_totals_for_lines(lines: Iterable[OrderLineItem], tax_rate: float) -> OrderTotals:
    subtotal = sum((line.sub_total for line in lines), 0.0)
    tax = subtotal * tax_rate
    return OrderTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


class Cart:
    """Ordered cart entries with at most one row per (item, variant) pair."""

    def __init__(self) -> None:
        self._entries: list[CartEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CartEntry]:
        return iter(list(self._entries))

    @property
    def entries(self) -> list[CartEntry]:
        return list(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def add_item(self, item: MenuItem, variant_id: str, quantity: int = 1) -> CartEntry:
        """Add a selection, merging it into an existing row for the same pair."""
        candidate = CartEntry(item=item, variant_id=variant_id, quantity=quantity)
        self._entries = merge_entries([*self._entries, candidate])
        merged = next(entry for entry in self._entries if entry.key == candidate.key)
        logger.debug("cart add item=%s variant=%s qty=%s -> %s", item.id, variant_id, quantity, merged.quantity)
        return merged

    def remove_item(self, index: int) -> None:
        """Drop the row at ``index``; indices outside the cart are ignored."""
        if 0 <= index < len(self._entries):
            removed = self._entries.pop(index)
            logger.debug("cart remove index=%s item=%s", index, removed.item.id)

    def clear(self) -> None:
        self._entries = []

    def quantities(self) -> dict[tuple[str, str], int]:
        return {entry.key: entry.quantity for entry in self._entries}

    def subtract(self, quantities: dict[tuple[str, str], int]) -> None:
        """Take ``quantities`` (as returned by ``quantities()``) out of the cart.

        Rows added or topped up since the snapshot keep the difference.
        """
        remaining: list[CartEntry] = []
        for entry in self._entries:
            left = entry.quantity - quantities.get(entry.key, 0)
            if left > 0:
                entry.quantity = left
                remaining.append(entry)
        self._entries = remaining

    def line_items(self) -> list[OrderLineItem]:
        lines: list[OrderLineItem] = []
        for entry in self._entries:
            variant = entry.variant
            price = variant.price if variant is not None else 0.0
            lines.append(
                OrderLineItem(
                    menu_item_id=entry.item.id,
                    name=entry.item.name,
                    variation_name=variant.name if variant is not None else None,
                    quantity=entry.quantity,
                    price=price,
                    sub_total=entry.quantity * price,
                )
            )
        return lines

    def compute_totals(self, tax_rate: float) -> OrderTotals:
        """Sum unrounded line prices; unknown variants count as zero and are reported."""
        subtotal = 0.0
        unresolved: list[tuple[str, str]] = []
        for entry in self._entries:
            variant = entry.variant
            if variant is None:
                logger.warning(
                    "Cart entry references unknown variant %s of item %s; counted as zero",
                    entry.variant_id,
                    entry.item.id,
                )
                unresolved.append(entry.key)
                continue
            subtotal += variant.price * entry.quantity
        tax = subtotal * tax_rate
        return OrderTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, unresolved=tuple(unresolved))
