from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from smart_menu.analytics.store import clear_events
from smart_menu.errors import CatalogError
from smart_menu.recommendations.models import DishRecord, DishStub, Ingredient

# Wednesday evening: weekday, evening, high urgency, medium time available.
WEDNESDAY_EVENING = datetime(2024, 5, 15, 19, 0, tzinfo=timezone.utc)


def make_dish(
    dish_id: str = "52772",
    name: str = "Test Dish",
    category: str = "Chicken",
    area: str = "",
    ingredients: tuple[str, ...] = ("Chicken", "Rice", "Carrot"),
    instructions: str = "Cook the rice. Fry the chicken for 15 minutes. Add the carrot and serve.",
) -> DishRecord:
    return DishRecord(
        id=dish_id,
        name=name,
        category=category,
        area=area,
        ingredients=tuple(Ingredient(name=i, measure="1") for i in ingredients),
        instructions=instructions,
    )


class InMemoryGateway:
    """Catalog double keyed by category and area, with injectable failures."""

    def __init__(
        self,
        dishes: list[DishRecord] | None = None,
        failing_categories: set[str] | None = None,
        failing_lookups: set[str] | None = None,
        hanging_lookups: set[str] | None = None,
    ) -> None:
        self.dishes = list(dishes or [])
        self.failing_categories = failing_categories or set()
        self.failing_lookups = failing_lookups or set()
        self.hanging_lookups = hanging_lookups or set()
        self.category_calls: list[str] = []
        self.cuisine_calls: list[str] = []

    async def list_by_category(self, category: str) -> list[DishStub]:
        self.category_calls.append(category)
        if category in self.failing_categories:
            raise CatalogError(f"boom: {category}")
        return [DishStub(id=d.id, name=d.name) for d in self.dishes if d.category == category]

    async def list_by_cuisine(self, cuisine: str) -> list[DishStub]:
        self.cuisine_calls.append(cuisine)
        return [DishStub(id=d.id, name=d.name) for d in self.dishes if d.area == cuisine]

    async def get_details(self, dish_id: str) -> DishRecord | None:
        if dish_id in self.failing_lookups:
            raise CatalogError(f"boom: {dish_id}")
        if dish_id in self.hanging_lookups:
            await asyncio.sleep(5)
        return next((d for d in self.dishes if d.id == dish_id), None)


@pytest.fixture(autouse=True)
def _clear_analytics():
    clear_events()
    yield
    clear_events()
