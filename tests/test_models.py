"""
Tests for payload parsing and derived model fields.
"""

import pytest

from chowhub.models import ActiveOrder, LoginForm, MenuItem, User, Variation


def _item(*availability):
    return MenuItem(
        id="m",
        name="M",
        category="c",
        variations=tuple(
            Variation(id=f"v{i}", name=f"V{i}", price=1.0, is_available=flag) for i, flag in enumerate(availability)
        ),
    )


class TestDisabledDerivation:
    def test_all_unavailable_is_disabled(self):
        assert _item(False, False).is_disabled is True

    def test_one_available_is_enabled(self):
        assert _item(False, True).is_disabled is False

    def test_no_variations_is_disabled(self):
        assert _item().is_disabled is True

    def test_parsed_payload(self, menu_items):
        assert menu_items["soup"].is_disabled is True
        assert menu_items["burger"].is_disabled is False


class TestPayloads:
    def test_missing_availability_means_available(self):
        variation = Variation.from_payload({"_id": "v", "name": "V", "price": "2.50"})
        assert variation.is_available is True
        assert variation.price == 2.5

    def test_populated_category_and_bare_ingredients(self):
        item = MenuItem.from_payload(
            {
                "id": "i",
                "name": "Item",
                "category": {"_id": "cat", "name": "Cat"},
                "variations": [{"_id": "v", "name": "V", "price": 1, "ingredients": ["ing1"]}],
            }
        )
        assert item.category == "cat"
        assert item.variations[0].ingredients[0].id == "ing1"

    def test_missing_id_is_rejected(self):
        with pytest.raises(ValueError):
            MenuItem.from_payload({"name": "nameless"})

    def test_user_round_trip(self):
        user = User.from_payload(
            {"_id": "u", "username": "bob", "role": "staff", "restaurantId": 7, "restaurantUsername": "acme"}
        )
        again = User.from_payload(user.to_payload())

        assert again == user
        assert again.restaurant_id == "7"
        assert again.is_manager is False

    def test_active_order(self):
        order = ActiveOrder.from_payload(
            {
                "_id": "o1",
                "orderNumber": 12,
                "status": "in progress",
                "total": "28.82",
                "createdAt": "2026-10-19T10:00:00Z",
                "orderLineItems": [
                    {"menuItemId": "burger", "name": "Burger", "variationName": "Single", "quantity": 2,
                     "price": 10, "subTotal": 20},
                ],
            }
        )
        assert order.order_number == 12
        assert order.total == pytest.approx(28.82)
        assert order.line_items[0].variation_name == "Single"


class TestLoginForm:
    def test_valid(self):
        assert LoginForm(username="alice", password="secret1").validate() == []

    def test_field_errors(self):
        form = LoginForm(username="  al ", password="123")
        errors = form.validate()

        assert [error.field for error in errors] == ["username", "password"]
        assert form.errors == errors
