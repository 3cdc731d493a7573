"""
Tests for text renderers.
"""

from chowhub.models import CartEntry, IngredientRef, OrderTotals, Variation
from chowhub.rendering import (
    format_cart_entry,
    format_menu_item_label,
    format_money,
    format_totals,
    ingredient_preview,
)


def test_out_of_stock_label(menu_items):
    assert "(Out of stock)" in format_menu_item_label(menu_items["soup"]).plain
    assert "(Out of stock)" not in format_menu_item_label(menu_items["burger"]).plain


def test_ingredient_preview_truncates():
    variation = Variation(
        id="v",
        name="V",
        price=1.0,
        ingredients=tuple(IngredientRef(id=str(i), name=f"ingredient-{i}") for i in range(10)),
    )
    preview = ingredient_preview(variation)

    assert preview.endswith("...")
    assert len(preview) == 53
    assert ingredient_preview(None) == "No ingredients listed"


def test_cart_entry_with_missing_variant(menu_items):
    text = format_cart_entry(CartEntry(menu_items["burger"], "gone", 2)).plain

    assert "Variant: N/A" in text
    assert "$0.00" in text


def test_totals_block():
    text = format_totals(OrderTotals(subtotal=25.5, tax=3.315, total=28.815), 0.13).plain

    assert "Subtotal: $25.50" in text
    assert "Tax (13%)" in text
    assert "Total: $28.82" in text


def test_format_money():
    assert format_money(5.5) == "$5.50"
