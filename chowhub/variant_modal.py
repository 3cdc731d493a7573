"""Variation and quantity picker modal."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from chowhub.models import MenuItem
from chowhub.rendering import format_variation_label, ingredient_preview

Selection = tuple[str, int]


class VariantModal(ModalScreen[Selection | None]):
    """Centered modal to choose one variation and a quantity for a menu item."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Choose"),
        ("plus", "change_quantity(1)", "More"),
        ("equals_sign", "change_quantity(1)", "More"),
        ("minus", "change_quantity(-1)", "Less"),
        ("a", "add_to_cart", "Add to cart"),
    ]

    CSS = """
    VariantModal {
        align: center middle;
        background: $background 60%;
    }

    #variant-dialog {
        width: 72;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #variant-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #variant-body {
        margin-bottom: 1;
        color: white;
    }

    #variant-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, item: MenuItem) -> None:
        super().__init__()
        self.item = item
        self.quantity = 1
        self.selected_variant_id: str | None = None

    def compose(self) -> ComposeResult:
        with Container(id="variant-dialog"):
            yield Static(self.item.name, id="variant-title")
            yield Static(id="variant-body")
            yield Static("J/K/↑/↓ move, Enter choose, +/- quantity, A add to cart, Esc/q close", id="variant-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.item.variations:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.item.variations)
        self._refresh_content()

    def action_choose_current(self) -> None:
        if not self.item.variations:
            return
        variation = self.item.variations[self.cursor_index]
        # Out-of-stock variations cannot be chosen.
        if not variation.is_available:
            return
        self.selected_variant_id = variation.id
        self._refresh_content()

    def action_change_quantity(self, delta: int) -> None:
        self.quantity = max(1, self.quantity + delta)
        self._refresh_content()

    def action_add_to_cart(self) -> None:
        if self.selected_variant_id is None:
            return
        self.dismiss((self.selected_variant_id, self.quantity))

    def _refresh_content(self) -> None:
        body = self.query_one("#variant-body", Static)

        content = Text(style="white")
        if self.item.description:
            content.append(f"{self.item.description}\n\n")
        content.append(f"Quantity: {self.quantity}\n\n", style="bold white")
        content.append("Choose a variant:\n", style="bold white")
        for idx, variation in enumerate(self.item.variations):
            pointer = "➤ " if idx == self.cursor_index else "  "
            checked = "(•)" if variation.id == self.selected_variant_id else "( )"
            content.append(f"\n{pointer}{checked} ")
            content.append_text(format_variation_label(variation))
            content.append(f"\n        Ingredients: {ingredient_preview(variation)}", style="#aaaaaa")
        body.update(content)
