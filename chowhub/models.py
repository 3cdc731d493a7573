"""Domain models for the ChowHub order terminal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chowhub.config import MANAGER_ROLE


def _payload_id(payload: dict[str, Any]) -> str:
    # The backend sends Mongo-style "_id"; accept plain "id" as well.
    raw = payload.get("_id", payload.get("id"))
    if raw is None:
        raise ValueError(f"payload has no id: {payload!r}")
    return str(raw)


@dataclass(frozen=True)
class Category:
    """A menu category."""

    id: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Category:
        return cls(id=_payload_id(payload), name=str(payload.get("name", "")))


@dataclass(frozen=True)
class IngredientRef:
    """An ingredient referenced by a variation."""

    id: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | str) -> IngredientRef:
        # Unpopulated references arrive as bare ids.
        if isinstance(payload, str):
            return cls(id=payload, name=payload)
        return cls(id=_payload_id(payload), name=str(payload.get("name", "")))


@dataclass(frozen=True)
class Variation:
    """A purchasable configuration of a menu item."""

    id: str
    name: str
    price: float
    cost: float = 0.0
    is_available: bool = True
    ingredients: tuple[IngredientRef, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Variation:
        return cls(
            id=_payload_id(payload),
            name=str(payload.get("name", "")),
            price=float(payload.get("price") or 0),
            cost=float(payload.get("cost") or 0),
            # Missing flag means available; only an explicit false disables.
            is_available=payload.get("isAvailable") is not False,
            ingredients=tuple(IngredientRef.from_payload(ing) for ing in payload.get("ingredients") or []),
        )


@dataclass(frozen=True)
class MenuItem:
    """A menu item snapshot as currently known to the client."""

    id: str
    name: str
    category: str | None
    variations: tuple[Variation, ...] = ()
    description: str = ""
    image: str = ""

    @property
    def is_disabled(self) -> bool:
        """True when no variation can be ordered."""
        return all(not variation.is_available for variation in self.variations)

    def variation(self, variant_id: str) -> Variation | None:
        for variation in self.variations:
            if variation.id == variant_id:
                return variation
        return None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> MenuItem:
        category = payload.get("category")
        if isinstance(category, dict):
            category = _payload_id(category)
        return cls(
            id=_payload_id(payload),
            name=str(payload.get("name", "")),
            category=str(category) if category is not None else None,
            variations=tuple(Variation.from_payload(v) for v in payload.get("variations") or []),
            description=str(payload.get("description") or ""),
            image=str(payload.get("image") or ""),
        )


@dataclass
class CartEntry:
    """One (menu item, variation, quantity) selection awaiting checkout."""

    item: MenuItem
    variant_id: str
    quantity: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be a positive integer")

    @property
    def key(self) -> tuple[str, str]:
        return (self.item.id, self.variant_id)

    @property
    def variant(self) -> Variation | None:
        return self.item.variation(self.variant_id)


@dataclass(frozen=True)
class OrderLineItem:
    """Submission-time line of an order, derived from a cart entry."""

    menu_item_id: str
    name: str
    variation_name: str | None
    quantity: int
    price: float
    sub_total: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "menuItemId": self.menu_item_id,
            "name": self.name,
            "variationName": self.variation_name,
            "quantity": self.quantity,
            "price": self.price,
            "subTotal": self.sub_total,
        }


@dataclass(frozen=True)
class OrderTotals:
    """Unrounded order totals."""

    subtotal: float
    tax: float
    total: float
    unresolved: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class User:
    """The logged-in staff member."""

    id: str
    username: str
    role: str
    restaurant_id: str | None = None
    restaurant_username: str | None = None
    first_name: str = ""

    @property
    def is_manager(self) -> bool:
        return self.role == MANAGER_ROLE

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> User:
        restaurant_id = payload.get("restaurantId")
        return cls(
            id=_payload_id(payload),
            username=str(payload.get("username", "")),
            role=str(payload.get("role", "")),
            restaurant_id=str(restaurant_id) if restaurant_id is not None else None,
            restaurant_username=payload.get("restaurantUsername"),
            first_name=str(payload.get("firstName") or ""),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "username": self.username,
            "role": self.role,
            "restaurantId": self.restaurant_id,
            "restaurantUsername": self.restaurant_username,
            "firstName": self.first_name,
        }


@dataclass(frozen=True)
class ActiveOrder:
    """An order waiting to be fulfilled."""

    id: str
    order_number: int | None
    status: str
    total: float
    created_at: str
    line_items: tuple[OrderLineItem, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ActiveOrder:
        lines = tuple(
            OrderLineItem(
                menu_item_id=str(line.get("menuItemId", "")),
                name=str(line.get("name", "")),
                variation_name=line.get("variationName"),
                quantity=int(line.get("quantity") or 0),
                price=float(line.get("price") or 0),
                sub_total=float(line.get("subTotal") or 0),
            )
            for line in payload.get("orderLineItems") or []
        )
        number = payload.get("orderNumber")
        return cls(
            id=_payload_id(payload),
            order_number=int(number) if number is not None else None,
            status=str(payload.get("status", "")),
            total=float(payload.get("total") or 0),
            created_at=str(payload.get("createdAt", "")),
            line_items=lines,
        )


@dataclass(frozen=True)
class FieldError:
    """A validation failure for one named form field."""

    field: str
    message: str


@dataclass
class LoginForm:
    """Login form state."""

    username: str = ""
    password: str = ""
    errors: list[FieldError] = field(default_factory=list)

    def validate(self) -> list[FieldError]:
        errors: list[FieldError] = []
        if len(self.username.strip()) < 3:
            errors.append(FieldError("username", "Username must be at least 3 characters long"))
        if len(self.password) < 6:
            errors.append(FieldError("password", "Password must be at least 6 characters long"))
        self.errors = errors
        return errors
