"""Access control for dashboard views."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Protocol

from chowhub.config import LOGIN_ROUTE, UNAUTHORIZED_ROUTE
from chowhub.session import SessionStore

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    def replace(self, path: str) -> None: ...


class GuardState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    UNAUTHENTICATED = "unauthenticated"
    MISMATCHED = "mismatched"
    AUTHORIZED = "authorized"


def dashboard_route(restaurant_username: str) -> str:
    return f"/{restaurant_username}/dashboard"


class _Redirector:
    def __init__(self, navigator: Navigator) -> None:
        self.navigator = navigator
        self._last_redirect: str | None = None

    def _redirect(self, path: str) -> None:
        # Re-evaluations may fire on every session change; only navigate once per target.
        if path == self._last_redirect:
            return
        self._last_redirect = path
        logger.info("redirect -> %s", path)
        self.navigator.replace(path)


class SessionGuard(_Redirector):
    """Keeps dashboard views behind a session for the restaurant in the route.

    States follow the session lifecycle: ``UNINITIALIZED`` until
    ``initialize`` hydrates storage, then ``UNAUTHENTICATED`` (redirected to
    the login route), ``MISMATCHED`` (redirected to the user's own
    dashboard) or ``AUTHORIZED``.
    """

    def __init__(self, session: SessionStore, navigator: Navigator, route_restaurant: str | None = None) -> None:
        super().__init__(navigator)
        self.session = session
        self.route_restaurant = route_restaurant
        self.state = GuardState.UNINITIALIZED
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.AUTHORIZED

    def initialize(self) -> GuardState:
        """Hydrate the stored session, then evaluate and follow later session changes."""
        if self.state is GuardState.UNINITIALIZED:
            self.session.hydrate()
            self._unsubscribe = self.session.subscribe(lambda _session: self.evaluate())
        return self.evaluate()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def navigate(self, route_restaurant: str | None) -> GuardState:
        self.route_restaurant = route_restaurant
        return self.evaluate()

    def evaluate(self) -> GuardState:
        user = self.session.user
        if not self.session.is_authenticated or user is None:
            self.state = GuardState.UNAUTHENTICATED
            self.session.clear()
            self._redirect(LOGIN_ROUTE)
            return self.state

        if (
            self.route_restaurant
            and user.restaurant_username
            and self.route_restaurant != user.restaurant_username
        ):
            self.state = GuardState.MISMATCHED
            self.route_restaurant = user.restaurant_username
            # The navigator may re-enter navigate() for the new route and authorize.
            self._redirect(dashboard_route(user.restaurant_username))
            return self.state

        self.state = GuardState.AUTHORIZED
        self._last_redirect = None
        return self.state


class ManagerGuard(_Redirector):
    """Restricts a view to users with the manager role."""

    def __init__(self, session: SessionStore, navigator: Navigator) -> None:
        super().__init__(navigator)
        self.session = session
        self._user_id: str | None = None
        self._unsubscribe = session.subscribe(lambda _session: self.evaluate())

    @property
    def allowed(self) -> bool:
        user = self.session.user
        return user is not None and user.is_manager

    def evaluate(self) -> bool:
        user = self.session.user
        user_id = user.id if user is not None else None
        if user_id != self._user_id:
            self._user_id = user_id
            self._last_redirect = None
        if user is not None and not user.is_manager:
            self._redirect(UNAUTHORIZED_ROUTE)
        return self.allowed

    def require(self) -> bool:
        """Check on an explicit user request; a refusal is reported every time."""
        self._last_redirect = None
        return self.evaluate()

    def close(self) -> None:
        self._unsubscribe()
