"""Main Textual app class."""

from __future__ import annotations

import asyncio
import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import Header, Static

from chowhub.api import ApiClient, ApiError
from chowhub.auth import LoginValidationError, login, logout
from chowhub.cart import Cart
from chowhub.catalog import CatalogCache, CatalogError
from chowhub.checkout import BUSY, EMPTY_CART, CheckoutSubmitter, fetch_tax_rate
from chowhub.comment_modal import CommentModal
from chowhub.config import DEFAULT_TAX_RATE_PERCENT, LOGIN_ROUTE
from chowhub.guard import GuardState, SessionGuard
from chowhub.login_modal import LoginModal, LoginRequest
from chowhub.models import MenuItem
from chowhub.orders import ActiveOrders
from chowhub.orders_modal import ActiveOrdersModal
from chowhub.rendering import format_cart_entry, format_menu_item_label, format_totals
from chowhub.session import SessionStore
from chowhub.variant_modal import Selection, VariantModal

logger = logging.getLogger(__name__)


class _AppNavigator:
    def __init__(self, app: DashboardApp) -> None:
        self.app = app

    def replace(self, path: str) -> None:
        self.app.navigate_to(path)


class DashboardApp(App):
    """Order-creation dashboard: browse the menu, build a cart, submit orders."""

    TITLE = "ChowHub"
    SUB_TITLE = "Create Order"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #menu-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #cart-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #menu-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #totals {
        border-top: solid $secondary;
        padding: 1 1 0 1;
    }

    #comment {
        border: heavy $secondary;
        padding: 0 1;
        height: 3;
    }

    #status-bar {
        height: 2;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    menu_index = reactive(0)
    cart_index = reactive(None)

    BINDINGS = [
        ("j", "move_menu(1)", "Next item"),
        ("k", "move_menu(-1)", "Previous item"),
        ("down", "move_menu(1)", "Next item"),
        ("up", "move_menu(-1)", "Previous item"),
        ("enter", "open_selected_item", "Choose item"),
        ("J", "move_cart(1)", "Next cart row"),
        ("K", "move_cart(-1)", "Previous cart row"),
        ("shift+down", "move_cart(1)", "Next cart row"),
        ("shift+up", "move_cart(-1)", "Previous cart row"),
        ("d", "remove_cart_row", "Remove"),
        ("c", "edit_comment", "Comment"),
        ("r", "refresh_catalog", "Refresh menu"),
        ("o", "show_active_orders", "Active orders"),
        Binding("ctrl+s", "submit_order", "Submit Order", priority=True),
        ("ctrl+l", "logout", "Logout"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, session: SessionStore, api: ApiClient, route_restaurant: str | None = None) -> None:
        super().__init__()
        self.session = session
        self.api = api
        self.api.on_session_expired = lambda message: self.notify(message, severity="warning")
        self.cart = Cart()
        self.catalog = CatalogCache(api)
        self.submitter = CheckoutSubmitter(api, self.cart, self.catalog, notify=self._notify_level)
        self.active_orders = ActiveOrders(api)
        self.guard = SessionGuard(session, _AppNavigator(self), route_restaurant)
        self.tax_rate = DEFAULT_TAX_RATE_PERCENT / 100
        self.system_status = ""
        self._login_open = False

    # Navigation

    def navigate_to(self, path: str) -> None:
        logger.info("navigate %s", path)
        if path == LOGIN_ROUTE:
            self.catalog.invalidate()
            self._open_login()
            return
        restaurant = path.strip("/").split("/")[0]
        self.sub_title = f"{restaurant} / Create Order"
        self.guard.navigate(restaurant)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="menu-pane"):
                yield Static("Menu", classes="pane-title")
                yield Static("Loading menu items...", id="menu-list")
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static("No items in cart.", id="cart-list")
                yield Static(id="totals")
                yield Static(id="comment")
                yield Static(id="status-bar")

    def on_mount(self) -> None:
        state = self.guard.initialize()
        logger.info("on_mount guard_state=%s", state.value)
        if self.guard.allowed:
            self._start_dashboard()
        self._refresh_all()

    async def on_unmount(self) -> None:
        # Results of requests still in flight must not be applied any more.
        self.catalog.invalidate()
        self.guard.close()
        # Pooled connections belong to this event loop.
        await self.api.aclose()

    def _dashboard_blocked(self) -> bool:
        """True while the login form or another modal owns the keyboard."""
        return self._login_open or len(self.screen_stack) > 1

    # Loading

    def _start_dashboard(self) -> None:
        user = self.session.user
        if user is not None and user.restaurant_username:
            self.sub_title = f"{user.restaurant_username} / Create Order"
        self.run_worker(self._load_dashboard(), group="load")

    async def _load_dashboard(self) -> None:
        # Tax rate and catalog touch disjoint state and may race.
        await asyncio.gather(self._load_tax_rate(), self._refresh_catalog())

    async def _load_tax_rate(self) -> None:
        user = self.session.user
        if user is None or not user.restaurant_id:
            return
        try:
            self.tax_rate = await fetch_tax_rate(self.api, user.restaurant_id)
        except ApiError as exc:
            logger.warning("tax rate lookup failed, keeping %s: %s", self.tax_rate, exc)
            self.notify("Could not load the tax rate; using the default.", severity="warning")
        self._refresh_cart()

    async def _refresh_catalog(self) -> None:
        self._set_status("Refreshing...")
        try:
            await self.catalog.refresh()
        except CatalogError as exc:
            self.notify(str(exc), severity="error")
            self._set_status("Menu refresh failed")
            return
        self._set_status("Ready")
        self._refresh_menu()

    # Login

    def _open_login(self, error: str = "", username: str = "") -> None:
        if self._login_open:
            return
        self._login_open = True
        self.push_screen(LoginModal(error=error, username=username), self._on_login_dismissed)

    def _on_login_dismissed(self, request: LoginRequest | None) -> None:
        self._login_open = False
        if request is None:
            self.exit()
            return
        self.run_worker(self._login(request), group="auth", exclusive=True)

    async def _login(self, request: LoginRequest) -> None:
        try:
            user = await login(self.api, self.session, request.form, remember_me=request.remember_me)
        except (LoginValidationError, ApiError) as exc:
            logger.warning("login failed: %s", exc)
            self.notify(str(exc) or "Login failed. Please try again.", severity="error")
            self._open_login(error=str(exc), username=request.form.username)
            return
        self.notify(f"Welcome back, {user.first_name or user.username}!")
        self.guard.navigate(user.restaurant_username)
        if self.guard.state is GuardState.AUTHORIZED:
            self._start_dashboard()

    def action_logout(self) -> None:
        if self._dashboard_blocked():
            return
        logout(self.session)
        self._refresh_all()

    # Menu

    def _menu_items(self) -> list[MenuItem]:
        rows: list[MenuItem] = []
        listed = set()
        for category in self.catalog.categories:
            listed.add(category.id)
            rows.extend(self.catalog.items_in(category.id))
        for item in self.catalog.items:
            if (item.category or "") not in listed:
                rows.append(item)
        return rows

    def action_move_menu(self, delta: int) -> None:
        if self._dashboard_blocked():
            return
        rows = self._menu_items()
        if not rows:
            return
        self.menu_index = (self.menu_index + delta) % len(rows)
        self._refresh_menu()

    def action_open_selected_item(self) -> None:
        if self._dashboard_blocked():
            return
        rows = self._menu_items()
        if not (0 <= self.menu_index < len(rows)):
            return
        item = rows[self.menu_index]
        if item.is_disabled:
            self._set_status(f"{item.name} is out of stock")
            return
        self.push_screen(VariantModal(item), lambda selection: self._add_selection(item, selection))

    def _add_selection(self, item: MenuItem, selection: Selection | None) -> None:
        if selection is None:
            return
        variant_id, quantity = selection
        self.cart.add_item(item, variant_id, quantity)
        self.cart_index = len(self.cart) - 1
        self._refresh_cart()

    def action_refresh_catalog(self) -> None:
        if self._dashboard_blocked() or self.catalog.loading:
            return
        self.run_worker(self._refresh_catalog(), group="load")

    # Cart

    def action_move_cart(self, delta: int) -> None:
        if self._dashboard_blocked() or not len(self.cart):
            return
        if self.cart_index is None:
            self.cart_index = 0 if delta > 0 else len(self.cart) - 1
        else:
            self.cart_index = (self.cart_index + delta) % len(self.cart)
        self._refresh_cart()

    def action_remove_cart_row(self) -> None:
        if self._dashboard_blocked() or self.cart_index is None or self.submitter.in_flight:
            return
        idx = self.cart_index
        self.cart.remove_item(idx)
        self.cart_index = min(idx, len(self.cart) - 1) if len(self.cart) else None
        self._refresh_cart()

    def action_edit_comment(self) -> None:
        if self._dashboard_blocked():
            return
        self.push_screen(CommentModal(self.submitter.comment), self._set_comment)

    def _set_comment(self, comment: str | None) -> None:
        if comment is None:
            return
        self.submitter.comment = comment
        self._refresh_cart()

    def action_submit_order(self) -> None:
        logger.debug("submit_enter rows=%s in_flight=%s", len(self.cart), self.submitter.in_flight)
        if self._dashboard_blocked():
            return
        if self.submitter.in_flight:
            return
        if self.cart.is_empty:
            self._set_status("Nothing to submit")
            return
        self._set_status("Submitting...")
        self.run_worker(self._submit(), group="submit")

    async def _submit(self) -> None:
        result = await self.submitter.submit(self.tax_rate)
        if result.ok:
            self.cart_index = None
            self._set_status("Order placed")
            self._refresh_menu()
        elif result.error == BUSY:
            return
        elif result.error == EMPTY_CART:
            self._set_status("Nothing to submit")
        else:
            self._set_status("Submit failed; cart kept for retry")
        self._refresh_cart()

    # Active orders

    def action_show_active_orders(self) -> None:
        if self._dashboard_blocked():
            return
        self.push_screen(ActiveOrdersModal(self.active_orders))

    # Rendering

    def _notify_level(self, level: str, message: str) -> None:
        self.notify(message, severity=level)

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_status()

    def _refresh_all(self) -> None:
        self._refresh_menu()
        self._refresh_cart()
        self._refresh_status()

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        if self.submitter.in_flight:
            bar.update("Submitting...")
            return
        bar.update(Text(f"Enter choose, C comment, Ctrl+S submit, R refresh.\n{self.system_status or 'Ready'}"))

    def _refresh_menu(self) -> None:
        try:
            menu_widget = self.query_one("#menu-list", Static)
        except NoMatches:
            return
        if self.catalog.loading and not self.catalog.items:
            menu_widget.update("Loading menu items...")
            return
        if not self.catalog.items:
            menu_widget.update("(no menu items)")
            return

        rows = self._menu_items()
        if self.menu_index >= len(rows):
            self.menu_index = 0

        names = {category.id: category.name for category in self.catalog.categories}
        lines = Text()
        current_category: str | None = None
        for idx, item in enumerate(rows):
            category = item.category or ""
            if category != current_category:
                current_category = category
                if idx:
                    lines.append("\n")
                lines.append(f"{names.get(category, 'Uncategorized')}\n", style="bold underline")
            pointer = "➤ " if idx == self.menu_index else "  "
            lines.append(pointer)
            lines.append_text(format_menu_item_label(item))
            lines.append("\n")
        menu_widget.update(lines)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
            totals_widget = self.query_one("#totals", Static)
            comment_widget = self.query_one("#comment", Static)
        except NoMatches:
            return

        if self.cart.is_empty:
            self.cart_index = None
            cart_widget.update("No items in cart.")
        else:
            if self.cart_index is not None and self.cart_index >= len(self.cart):
                self.cart_index = len(self.cart) - 1
            lines = Text()
            for idx, entry in enumerate(self.cart):
                if idx:
                    lines.append("\n")
                pointer = "➤ " if idx == self.cart_index else "  "
                lines.append(f"{pointer}{idx + 1}. ")
                lines.append_text(format_cart_entry(entry))
            cart_widget.update(lines)

        totals_widget.update(format_totals(self.cart.compute_totals(self.tax_rate), self.tax_rate))
        comment_widget.update(Text(self.submitter.comment or "Comments", style="" if self.submitter.comment else "dim"))
        self._refresh_status()
