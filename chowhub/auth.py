"""Login and logout."""

from __future__ import annotations

import logging

from chowhub.api import ApiClient, ApiError
from chowhub.models import FieldError, LoginForm, User
from chowhub.session import SessionStore

logger = logging.getLogger(__name__)


class LoginValidationError(ValueError):
    """The login form failed client-side validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("; ".join(error.message for error in errors))
        self.errors = errors


async def login(api: ApiClient, session: SessionStore, form: LoginForm, remember_me: bool = False) -> User:
    """Validate the form, authenticate, and start a session."""
    errors = form.validate()
    if errors:
        raise LoginValidationError(errors)

    body = await api.post("/auth/login", json={"username": form.username.strip(), "password": form.password})
    try:
        token = str(body["token"])
        user = User.from_payload(body["user"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Malformed login response: {exc}") from exc

    session.login(token, user, remember_me=remember_me)
    return user


def logout(session: SessionStore) -> None:
    logger.info("logout requested")
    session.clear()
