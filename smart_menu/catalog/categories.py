from __future__ import annotations

from types import MappingProxyType

from ..recommendations.models import DietaryRestriction, Occasion

# ---------------------------------------------------------------------------
# Occasion → TheMealDB categories
# ---------------------------------------------------------------------------

MEAL_CATEGORIES: MappingProxyType[Occasion, tuple[str, ...]] = MappingProxyType({
    Occasion.breakfast: ("Breakfast", "Dessert", "Miscellaneous"),
    Occasion.lunch: ("Beef", "Chicken", "Pork", "Pasta", "Seafood", "Lamb"),
    Occasion.dinner: ("Chicken", "Seafood", "Vegetarian", "Pasta", "Side", "Starter"),
})

EXTENDED_CATEGORIES: MappingProxyType[Occasion, tuple[str, ...]] = MappingProxyType({
    Occasion.breakfast: ("Side", "Starter"),
    Occasion.lunch: ("Goat", "Miscellaneous"),
    Occasion.dinner: ("Dessert", "Vegan"),
})

AVAILABLE_CATEGORIES: frozenset[str] = frozenset({
    "Beef", "Breakfast", "Chicken", "Dessert", "Goat", "Lamb",
    "Miscellaneous", "Pasta", "Pork", "Seafood", "Side",
    "Starter", "Vegan", "Vegetarian",
})

# Higher = better suited to the occasion; unknown categories get 1.
CATEGORY_PRIORITIES: MappingProxyType[Occasion, MappingProxyType[str, int]] = MappingProxyType({
    Occasion.breakfast: MappingProxyType({
        "Breakfast": 10, "Dessert": 7, "Miscellaneous": 5, "Side": 3, "Starter": 3,
    }),
    Occasion.lunch: MappingProxyType({
        "Beef": 9, "Chicken": 9, "Pork": 8, "Pasta": 8,
        "Seafood": 7, "Lamb": 7, "Goat": 5, "Miscellaneous": 6,
    }),
    Occasion.dinner: MappingProxyType({
        "Seafood": 9, "Chicken": 8, "Vegetarian": 8, "Pasta": 7,
        "Side": 6, "Starter": 6, "Dessert": 4, "Vegan": 7,
    }),
})

DIETARY_CATEGORY_MAP: MappingProxyType[DietaryRestriction, frozenset[str]] = MappingProxyType({
    DietaryRestriction.vegetarian: frozenset({"Vegetarian", "Vegan", "Side", "Starter", "Dessert"}),
    DietaryRestriction.vegan: frozenset({"Vegan", "Side"}),
    DietaryRestriction.pescatarian: frozenset({"Seafood", "Vegetarian", "Vegan", "Side", "Starter"}),
    DietaryRestriction.low_carb: frozenset({"Beef", "Chicken", "Pork", "Seafood", "Lamb"}),
    DietaryRestriction.high_protein: frozenset({"Beef", "Chicken", "Pork", "Seafood", "Lamb", "Goat"}),
})

DIETARY_DEFAULT_CATEGORIES: tuple[str, ...] = ("Vegetarian", "Side", "Starter")

# ---------------------------------------------------------------------------
# Cuisines (TheMealDB "area")
# ---------------------------------------------------------------------------

CUISINES: frozenset[str] = frozenset({
    "American", "British", "Canadian", "Chinese", "Croatian", "Dutch", "Egyptian",
    "Filipino", "French", "Greek", "Indian", "Irish", "Italian", "Jamaican",
    "Japanese", "Kenyan", "Malaysian", "Mexican", "Moroccan", "Polish",
    "Portuguese", "Russian", "Spanish", "Thai", "Tunisian", "Turkish",
    "Ukrainian", "Uruguayan", "Vietnamese",
})

POPULAR_CUISINES: tuple[str, ...] = (
    "Italian", "Chinese", "French", "Mexican", "Indian", "Japanese", "Thai", "American",
)


def get_categories_for_occasion(occasion: Occasion, include_extended: bool = False) -> list[str]:
    categories = list(MEAL_CATEGORIES.get(occasion, ()))
    if include_extended:
        categories.extend(EXTENDED_CATEGORIES.get(occasion, ()))
    return [c for c in categories if c in AVAILABLE_CATEGORIES]


def get_categories_with_restrictions(
    occasion: Occasion,
    restrictions: list[DietaryRestriction] | None = None,
) -> list[str]:
    """Occasion categories narrowed by each restriction that maps to catalog categories."""
    categories = get_categories_for_occasion(occasion, include_extended=True)
    for restriction in restrictions or []:
        allowed = DIETARY_CATEGORY_MAP.get(restriction)
        if allowed:
            categories = [c for c in categories if c in allowed]

    if not categories:
        categories = [c for c in DIETARY_DEFAULT_CATEGORIES if c in AVAILABLE_CATEGORIES]
    return categories


def get_category_priority(category: str, occasion: Occasion) -> int:
    priorities = CATEGORY_PRIORITIES.get(occasion)
    return priorities.get(category, 1) if priorities else 1


def validate_cuisines(cuisines: list[str] | None) -> list[str]:
    if not cuisines:
        return []
    return [c for c in cuisines if isinstance(c, str) and c in CUISINES]


def is_popular_cuisine(cuisine: str) -> bool:
    return cuisine in POPULAR_CUISINES
