"""Session context shared by the API client, guards and screens."""

from __future__ import annotations

import json
import logging
import re
from typing import Callable

from chowhub.models import User
from chowhub.persistence import (
    REMEMBER_KEY,
    TOKEN_KEY,
    USER_KEY,
    MemorySessionBackend,
    SessionBackend,
)

logger = logging.getLogger(__name__)

Listener = Callable[["SessionStore"], None]

_TOKEN_JUNK = re.compile(r'["\\]+')


def normalize_token(token: str | None) -> str | None:
    """Strip stray quotes and backslashes left by JSON-encoded storage."""
    if token is None:
        return None
    cleaned = _TOKEN_JUNK.sub("", token).strip()
    return cleaned or None


class SessionStore:
    """Owns the current token/user pair and notifies subscribers on change."""

    def __init__(self, persistent: SessionBackend, scoped: SessionBackend | None = None) -> None:
        self.persistent = persistent
        self.scoped = scoped if scoped is not None else MemorySessionBackend()
        self.token: str | None = None
        self.user: User | None = None
        self.remember_me = False
        self._listeners: list[Listener] = []

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def hydrate(self) -> bool:
        """Load a stored session, preferring the persistent backend."""
        for backend, remembered in ((self.persistent, True), (self.scoped, False)):
            token = normalize_token(backend.get(TOKEN_KEY))
            raw_user = backend.get(USER_KEY)
            if not token or not raw_user:
                continue
            try:
                user = User.from_payload(json.loads(raw_user))
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Discarding unreadable stored user: %s", exc)
                self.clear()
                return False
            self.token = token
            self.user = user
            self.remember_me = remembered and backend.get(REMEMBER_KEY) == "true"
            logger.info("Session hydrated for %s", user.username)
            self._emit()
            return True
        return False

    def login(self, token: str, user: User, remember_me: bool = False) -> None:
        cleaned = normalize_token(token)
        if not cleaned:
            raise ValueError("token must not be empty")

        self.token = cleaned
        self.user = user
        self.remember_me = remember_me

        serialized = json.dumps(user.to_payload())
        if remember_me:
            self.persistent.set(TOKEN_KEY, cleaned)
            self.persistent.set(USER_KEY, serialized)
            self.persistent.set(REMEMBER_KEY, "true")
        else:
            self.scoped.set(TOKEN_KEY, cleaned)
            self.scoped.set(USER_KEY, serialized)
            for key in (TOKEN_KEY, USER_KEY, REMEMBER_KEY):
                self.persistent.remove(key)
        logger.info("Session started for %s remember_me=%s", user.username, remember_me)
        self._emit()

    def clear(self) -> None:
        """Forget the session in memory and in both backends."""
        had_session = self.token is not None or self.user is not None
        self.token = None
        self.user = None
        self.remember_me = False
        for backend in (self.persistent, self.scoped):
            for key in (TOKEN_KEY, USER_KEY, REMEMBER_KEY):
                backend.remove(key)
        if had_session:
            logger.info("Session cleared")
            self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)
