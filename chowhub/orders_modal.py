"""Active orders board modal."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from chowhub.api import ApiError
from chowhub.models import ActiveOrder
from chowhub.orders import ActiveOrders, age_band
from chowhub.rendering import format_active_order

logger = logging.getLogger(__name__)


class ActiveOrdersModal(ModalScreen[None]):
    """Orders waiting in the kitchen; mark them fulfilled or cancel them."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("f", "complete_current", "Fulfilled"),
        ("x", "cancel_current", "Cancel order"),
        ("y", "confirm_cancel", "Confirm"),
        ("n", "keep_order", "Keep"),
        ("r", "reload", "Reload"),
    ]

    CSS = """
    ActiveOrdersModal {
        align: center middle;
        background: $background 60%;
    }

    #orders-dialog {
        width: 76;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #orders-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #orders-body {
        margin-bottom: 1;
        color: white;
    }

    #orders-help {
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, board: ActiveOrders) -> None:
        super().__init__()
        self.board = board
        self.busy = False
        self.loaded = False
        self.pending_cancel: ActiveOrder | None = None

    def compose(self) -> ComposeResult:
        with Container(id="orders-dialog"):
            yield Static("Active Orders", id="orders-title")
            yield Static(id="orders-body")
            yield Static("J/K move, F fulfilled, X cancel, R reload, Esc/q close", id="orders-help")

    def on_mount(self) -> None:
        self._refresh_content()
        self.action_reload()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.board.orders:
            return
        self.pending_cancel = None
        self.cursor_index = (self.cursor_index + delta) % len(self.board.orders)
        self._refresh_content()

    def action_reload(self) -> None:
        if self.busy:
            return
        self.busy = True
        self.run_worker(self._reload(), group="orders", exclusive=True)

    def action_complete_current(self) -> None:
        order = self._current_order()
        if order is None or self.busy:
            return
        self.busy = True
        self.run_worker(self._complete(order), group="orders", exclusive=True)

    def action_cancel_current(self) -> None:
        order = self._current_order()
        if order is None or self.busy:
            return
        self.pending_cancel = order
        self._refresh_content()

    def action_confirm_cancel(self) -> None:
        order = self.pending_cancel
        if order is None or self.busy:
            return
        self.pending_cancel = None
        self.busy = True
        self.run_worker(self._cancel(order), group="orders", exclusive=True)

    def action_keep_order(self) -> None:
        self.pending_cancel = None
        self._refresh_content()

    async def _reload(self) -> None:
        try:
            await self.board.load()
        except ApiError as exc:
            logger.warning("active orders load failed: %s", exc)
            self.app.notify("Failed to fetch active orders", severity="error")
        finally:
            self.loaded = True
            self._done()

    async def _complete(self, order: ActiveOrder) -> None:
        try:
            await self.board.complete(order.id)
        except ApiError as exc:
            logger.warning("complete %s failed: %s", order.id, exc)
            self.app.notify(f"Failed to mark fulfilled: {exc}", severity="error")
        else:
            self.app.notify("Order marked fulfilled")
        finally:
            self._done()

    async def _cancel(self, order: ActiveOrder) -> None:
        try:
            await self.board.cancel(order.id)
        except ApiError as exc:
            logger.warning("cancel %s failed: %s", order.id, exc)
            self.app.notify(f"Failed to cancel order: {exc}", severity="error")
        else:
            self.app.notify("Order cancelled")
        finally:
            self._done()

    def _done(self) -> None:
        self.busy = False
        if self.board.orders:
            self.cursor_index = min(self.cursor_index, len(self.board.orders) - 1)
        else:
            self.cursor_index = 0
        self._refresh_content()

    def _current_order(self) -> ActiveOrder | None:
        if 0 <= self.cursor_index < len(self.board.orders):
            return self.board.orders[self.cursor_index]
        return None

    def _refresh_content(self) -> None:
        body = self.query_one("#orders-body", Static)
        if not self.loaded:
            body.update("Loading active orders...")
            return
        if not self.board.orders:
            body.update("No active orders.")
            return

        content = Text()
        for idx, order in enumerate(self.board.orders):
            if idx:
                content.append("\n")
            content.append("➤ " if idx == self.cursor_index else "  ")
            content.append_text(format_active_order(order, age_band(order.created_at)))
        if self.pending_cancel is not None:
            content.append("\n\nAre you sure you want to cancel this order? Y cancel it, N keep it", style="bold #ff8888")
        body.update(content)
