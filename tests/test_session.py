"""
Tests for session storage, hydration and change notifications.
"""

import json

import pytest

from chowhub.persistence import REMEMBER_KEY, TOKEN_KEY, USER_KEY, MemorySessionBackend
from chowhub.session import SessionStore, normalize_token


class TestLogin:
    def test_remember_me_writes_persistent_backend(self, session, sqlite_backend, user):
        session.login("tok", user, remember_me=True)

        assert sqlite_backend.get(TOKEN_KEY) == "tok"
        assert json.loads(sqlite_backend.get(USER_KEY))["restaurantUsername"] == "acme"
        assert sqlite_backend.get(REMEMBER_KEY) == "true"

    def test_session_scoped_login_wipes_persistent_backend(self, session, sqlite_backend, user):
        session.login("old", user, remember_me=True)
        session.login("new", user, remember_me=False)

        assert sqlite_backend.get(TOKEN_KEY) is None
        assert session.scoped.get(TOKEN_KEY) == "new"

    def test_empty_token_rejected(self, session, user):
        with pytest.raises(ValueError):
            session.login('""', user)


class TestHydrate:
    def test_persistent_session_survives_restart(self, sqlite_backend, user):
        SessionStore(sqlite_backend).login("tok", user, remember_me=True)

        restarted = SessionStore(sqlite_backend, MemorySessionBackend())
        assert restarted.hydrate() is True
        assert restarted.token == "tok"
        assert restarted.user == user
        assert restarted.remember_me is True

    def test_scoped_session_does_not_survive_restart(self, sqlite_backend, user):
        SessionStore(sqlite_backend).login("tok", user, remember_me=False)

        restarted = SessionStore(sqlite_backend, MemorySessionBackend())
        assert restarted.hydrate() is False
        assert restarted.is_authenticated is False

    def test_unreadable_user_clears_everything(self, session, sqlite_backend):
        sqlite_backend.set(TOKEN_KEY, "tok")
        sqlite_backend.set(USER_KEY, "{not json")

        assert session.hydrate() is False
        assert sqlite_backend.get(TOKEN_KEY) is None
        assert session.token is None

    def test_quoted_token_is_cleaned(self, session, sqlite_backend, user):
        sqlite_backend.set(TOKEN_KEY, '"tok\\"')
        sqlite_backend.set(USER_KEY, json.dumps(user.to_payload()))

        session.hydrate()

        assert session.token == "tok"


class TestSubscribe:
    def test_listeners_see_login_and_clear(self, session, user):
        seen = []
        unsubscribe = session.subscribe(lambda store: seen.append(store.is_authenticated))

        session.login("tok", user)
        session.clear()
        unsubscribe()
        session.login("tok", user)

        assert seen == [True, False]

    def test_clear_without_session_is_silent(self, session):
        seen = []
        session.subscribe(lambda store: seen.append(store))

        session.clear()

        assert seen == []


@pytest.mark.parametrize("raw, expected", [('"abc"', "abc"), ("a\\b", "ab"), (None, None), ('""', None)])
def test_normalize_token(raw, expected):
    assert normalize_token(raw) == expected
