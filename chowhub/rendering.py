"""Rendering helpers for menu, cart and order rows."""

from __future__ import annotations

from rich.text import Text

from chowhub.cart import format_amount
from chowhub.models import ActiveOrder, CartEntry, MenuItem, OrderTotals, Variation

_BAND_STYLES: dict[str, str] = {
    "green": "bold #0b1f0f on #4caf50",
    "yellow": "bold #1f1a0b on #ffb74d",
    "orange": "bold #ffffff on #ff8a65",
    "red": "bold #ffffff on #ff7043",
    "critical": "bold #ffffff on #e53935",
}

_INGREDIENT_PREVIEW_CHARS = 50


def format_money(value: float) -> str:
    return f"${format_amount(value)}"


def badge_style(band: str) -> str:
    """Return a consistent badge style for order age bands."""
    return _BAND_STYLES.get(band, _BAND_STYLES["critical"])


def ingredient_preview(variation: Variation | None) -> str:
    if variation is None or not variation.ingredients:
        return "No ingredients listed"
    full = ", ".join(ingredient.name for ingredient in variation.ingredients)
    if len(full) > _INGREDIENT_PREVIEW_CHARS:
        return full[:_INGREDIENT_PREVIEW_CHARS] + "..."
    return full


def format_menu_item_label(item: MenuItem) -> Text:
    """Render a menu row; out-of-stock items are dimmed."""
    text = Text()
    if item.is_disabled:
        text.append(item.name, style="dim")
        text.append(" (Out of stock)", style="#ff8888")
        return text
    text.append(item.name, style="bold")
    first = item.variations[0] if item.variations else None
    text.append(f"  {ingredient_preview(first)}", style="#aaaaaa")
    return text


def format_variation_label(variation: Variation) -> Text:
    text = Text()
    style = "white" if variation.is_available else "dim"
    text.append(f"{variation.name} - {format_money(variation.price)}", style=style)
    if not variation.is_available:
        text.append(" (Out of stock)", style="#ff8888")
    return text


def format_cart_entry(entry: CartEntry) -> Text:
    variant = entry.variant
    text = Text()
    text.append(entry.item.name, style="bold")
    text.append(f"\n      Variant: {variant.name if variant is not None else 'N/A'}")
    text.append(f"  Qty: {entry.quantity}")
    price = variant.price * entry.quantity if variant is not None else 0.0
    text.append(f"  {format_money(price)}")
    return text


def format_totals(totals: OrderTotals, tax_rate: float) -> Text:
    percent_label = f"{tax_rate * 100:g}"
    text = Text()
    text.append(f"Subtotal: {format_money(totals.subtotal)}\n")
    text.append(f"Tax ({percent_label}%): {format_money(totals.tax)}\n")
    text.append(f"Total: {format_money(totals.total)}", style="bold")
    if totals.unresolved:
        text.append(f"\n{len(totals.unresolved)} item(s) no longer on the menu", style="#ff8888")
    return text


def format_active_order(order: ActiveOrder, band: str) -> Text:
    text = Text()
    label = f"#{order.order_number}" if order.order_number is not None else order.id[:8]
    text.append(f" {label} ", style=badge_style(band))
    text.append(f" {format_money(order.total)}")
    for line in order.line_items:
        variant = f" ({line.variation_name})" if line.variation_name else ""
        text.append(f"\n      {line.quantity}x {line.name}{variant}")
    return text
