"""
Pytest configuration and fixtures for the order terminal tests.
"""

import json

import httpx
import pytest

from chowhub.api import ApiClient
from chowhub.models import MenuItem, User
from chowhub.persistence import MemorySessionBackend, SqliteSessionBackend
from chowhub.session import SessionStore


MENU_PAYLOAD = {
    "menuItems": [
        {
            "_id": "burger",
            "name": "Burger",
            "description": "Beef patty",
            "category": "mains",
            "variations": [
                {"_id": "burger-single", "name": "Single", "price": 10, "cost": 4, "isAvailable": True,
                 "ingredients": [{"_id": "beef", "name": "Beef"}, {"_id": "bun", "name": "Bun"}]},
                {"_id": "burger-double", "name": "Double", "price": 14, "cost": 6, "isAvailable": False},
            ],
        },
        {
            "_id": "fries",
            "name": "Fries",
            "category": "sides",
            "variations": [
                {"_id": "fries-regular", "name": "Regular", "price": 5.5, "cost": 1, "isAvailable": True},
            ],
        },
        {
            "_id": "soup",
            "name": "Soup",
            "category": "mains",
            "variations": [
                {"_id": "soup-bowl", "name": "Bowl", "price": 7, "isAvailable": False},
                {"_id": "soup-cup", "name": "Cup", "price": 4, "isAvailable": False},
            ],
        },
    ]
}

CATEGORIES_PAYLOAD = {
    "categories": [
        {"_id": "mains", "name": "Mains"},
        {"_id": "sides", "name": "Sides"},
    ]
}

USER_PAYLOAD = {
    "_id": "u1",
    "username": "alice",
    "role": "manager",
    "restaurantId": "r1",
    "restaurantUsername": "acme",
    "firstName": "Alice",
}


class FakeBackend:
    """
    Route table for httpx.MockTransport.
    Each route maps "METHOD /path" to a (status, body) tuple or a callable.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, status=200, body=None):
        self.routes[f"{method} {path}"] = (status, body if body is not None else {})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        key = f"{request.method} {path}"
        self.calls.append((key, request))
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": f"no route {key}"})
        if callable(route):
            return await route(request)
        status, body = route
        return httpx.Response(status, json=body)

    def count(self, key):
        return sum(1 for call_key, _ in self.calls if call_key == key)

    def last_json(self, key):
        for call_key, request in reversed(self.calls):
            if call_key == key:
                return json.loads(request.content)
        return None


@pytest.fixture
def sqlite_backend(tmp_path):
    backend = SqliteSessionBackend(tmp_path / "session.db")
    backend.bootstrap_schema()
    return backend


@pytest.fixture
def session(sqlite_backend):
    return SessionStore(sqlite_backend, MemorySessionBackend())


@pytest.fixture
def user():
    return User.from_payload(USER_PAYLOAD)


@pytest.fixture
def logged_in(session, user):
    session.login("tok123", user, remember_me=False)
    return session


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.add("GET", "/menu-management", body=MENU_PAYLOAD)
    fake.add("GET", "/categories", body=CATEGORIES_PAYLOAD)
    return fake


@pytest.fixture
def api(logged_in, backend):
    return ApiClient(
        logged_in,
        base_url="http://chowhub.test/api",
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def menu_items():
    return {raw["_id"]: MenuItem.from_payload(raw) for raw in MENU_PAYLOAD["menuItems"]}
