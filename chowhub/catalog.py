"""In-memory snapshot of the menu and its categories."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from chowhub.api import ApiClient, ApiError
from chowhub.models import Category, MenuItem

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """The catalog could not be refreshed; the previous snapshot is kept."""


@dataclass(frozen=True)
class CatalogSnapshot:
    items: tuple[MenuItem, ...] = ()
    categories: tuple[Category, ...] = ()
    by_category: dict[str, tuple[MenuItem, ...]] = field(default_factory=dict)


def group_by_category(items: tuple[MenuItem, ...], categories: tuple[Category, ...]) -> dict[str, tuple[MenuItem, ...]]:
    """Group items under their category id, listed categories first."""
    grouped: dict[str, list[MenuItem]] = {category.id: [] for category in categories}
    for item in items:
        # Unknown categories get their own bucket.
        grouped.setdefault(item.category or "", []).append(item)
    return {category_id: tuple(members) for category_id, members in grouped.items()}


class CatalogCache:
    """Menu items and categories fetched from the API.

    ``refresh`` replaces the whole snapshot in one assignment, so readers
    never observe new items with old categories. A refresh that was
    overtaken by ``invalidate`` or a newer refresh drops its result.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._snapshot = CatalogSnapshot()
        self._generation = 0
        self.loading = False

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self._snapshot.items

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._snapshot.categories

    def items_in(self, category_id: str) -> tuple[MenuItem, ...]:
        return self._snapshot.by_category.get(category_id, ())

    def get(self, item_id: str) -> MenuItem | None:
        for item in self._snapshot.items:
            if item.id == item_id:
                return item
        return None

    def invalidate(self) -> None:
        """Make any in-flight refresh discard its result."""
        self._generation += 1
        self.loading = False

    async def refresh(self) -> bool:
        """Fetch the catalog; returns False when the result was discarded as stale."""
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            menu_body = await self.api.get("/menu-management")
            category_body = await self.api.get("/categories")
            items = tuple(MenuItem.from_payload(raw) for raw in menu_body["menuItems"])
            categories = tuple(Category.from_payload(raw) for raw in category_body["categories"])
        except (ApiError, httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.error("Catalog refresh failed: %r", exc)
            raise CatalogError(f"Failed to load menu items: {exc}") from exc
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.info("Discarding stale catalog refresh (generation %s)", generation)
            return False

        self._snapshot = CatalogSnapshot(
            items=items,
            categories=categories,
            by_category=group_by_category(items, categories),
        )
        disabled = sum(1 for item in items if item.is_disabled)
        logger.info("Catalog refreshed: %s items, %s categories, %s disabled", len(items), len(categories), disabled)
        return True
