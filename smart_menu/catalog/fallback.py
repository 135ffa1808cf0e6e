from __future__ import annotations

from types import MappingProxyType

from ..recommendations.models import DishRecord, Ingredient, Occasion


def _dish(
    dish_id: str,
    name: str,
    category: str,
    instructions: str,
    ingredients: list[tuple[str, str]],
    area: str = "",
) -> DishRecord:
    return DishRecord(
        id=dish_id,
        name=name,
        category=category,
        area=area,
        instructions=instructions,
        ingredients=tuple(Ingredient(name=n, measure=m) for n, m in ingredients),
    )


_BREAKFAST = (
    _dish(
        "fallback-breakfast-001", "Porridge with Berries", "Breakfast",
        "Cook the oats in milk for 5 minutes. Add honey and fresh berries. Serve hot.",
        [("Oats", "1 cup"), ("Milk", "2 cups"), ("Honey", "1 tbsp"), ("Berries", "1 handful")],
        area="British",
    ),
    _dish(
        "fallback-breakfast-002", "Fried Eggs on Toast", "Breakfast",
        "Heat a pan and crack in the eggs. Fry for 3-4 minutes. Toast the bread and serve together.",
        [("Eggs", "2"), ("Bread", "2 slices"), ("Butter", "1 tsp"), ("Salt", "pinch")],
        area="British",
    ),
    _dish(
        "fallback-breakfast-003", "Cottage Cheese with Fruit", "Breakfast",
        "Mix the cottage cheese with chopped fruit. Add honey to taste. Serve chilled.",
        [("Cottage Cheese", "200g"), ("Banana", "1"), ("Apple", "1"), ("Honey", "1 tsp")],
    ),
    _dish(
        "fallback-breakfast-004", "Simple Pancakes", "Breakfast",
        "Mix flour, milk, egg and salt into a batter. Fry thin pancakes in a hot pan "
        "for 1-2 minutes on each side.",
        [("Flour", "1 cup"), ("Milk", "1 cup"), ("Egg", "1"), ("Salt", "pinch"), ("Sugar", "1 tbsp")],
        area="American",
    ),
    _dish(
        "fallback-breakfast-005", "Yogurt with Muesli", "Breakfast",
        "Mix the yogurt with muesli. Top with fresh berries and nuts. Serve straight away.",
        [("Yogurt", "1 cup"), ("Muesli", "50g"), ("Berries", "1 handful"), ("Nuts", "1 tbsp")],
    ),
)

_LUNCH = (
    _dish(
        "fallback-lunch-001", "Chicken Breast with Rice", "Chicken",
        "Boil the rice. Fry the chicken breast with spices for 15 minutes. "
        "Serve with the rice and vegetables.",
        [("Chicken Breast", "2"), ("Rice", "1 cup"), ("Carrot", "1"), ("Onion", "1"), ("Spices", "1 tsp")],
    ),
    _dish(
        "fallback-lunch-002", "Spaghetti Bolognese", "Pasta",
        "Cook the spaghetti. Fry the minced beef with onion, add the tomatoes "
        "and simmer for 20 minutes. Serve over the pasta.",
        [("Spaghetti", "200g"), ("Minced Beef", "300g"), ("Onion", "1"), ("Tomatoes", "400g"), ("Garlic", "2 cloves")],
        area="Italian",
    ),
    _dish(
        "fallback-lunch-003", "Beef Stew", "Beef",
        "Cut the beef into chunks and brown it. Add the vegetables and water. "
        "Stew for 1 hour until tender.",
        [("Beef", "500g"), ("Potato", "3"), ("Carrot", "2"), ("Onion", "1"), ("Tomato Puree", "2 tbsp")],
        area="British",
    ),
    _dish(
        "fallback-lunch-004", "Baked Fish", "Seafood",
        "Season the fish with salt and pepper. Bake for 25 minutes at 180C. Serve with lemon.",
        [("White Fish", "2 fillets"), ("Lemon", "1"), ("Spices", "1 tsp"), ("Olive Oil", "1 tbsp")],
    ),
    _dish(
        "fallback-lunch-005", "Simple Pilaf", "Lamb",
        "Fry the meat and onion. Add the rice and twice the amount of water. "
        "Cook covered for 25 minutes.",
        [("Rice", "1 cup"), ("Lamb", "300g"), ("Onion", "1"), ("Carrot", "1"), ("Spices", "1 tsp")],
    ),
)

_DINNER = (
    _dish(
        "fallback-dinner-001", "Caesar Salad", "Starter",
        "Chop the lettuce and add croutons and cheese. Pour over the caesar dressing, "
        "toss and serve.",
        [("Lettuce", "1 head"), ("Parmesan", "30g"), ("Croutons", "1 handful"), ("Caesar Dressing", "3 tbsp")],
    ),
    _dish(
        "fallback-dinner-002", "Vegetable Soup", "Vegetarian",
        "Chop the vegetables. Boil them in water for 20 minutes. Add spices and serve hot with herbs.",
        [("Potato", "2"), ("Carrot", "2"), ("Cabbage", "1/4"), ("Onion", "1"), ("Herbs", "1 bunch")],
    ),
    _dish(
        "fallback-dinner-003", "Vegetable Omelette", "Vegetarian",
        "Whisk the eggs. Fry the vegetables, then add the eggs. Cook over low heat for 5-7 minutes.",
        [("Eggs", "3"), ("Tomato", "1"), ("Pepper", "1"), ("Onion", "1/2"), ("Cheese", "30g")],
    ),
    _dish(
        "fallback-dinner-004", "Fish Cakes", "Seafood",
        "Mince the fish, add the egg and flour. Shape into cakes and fry on both sides.",
        [("Fish Fillet", "400g"), ("Egg", "1"), ("Flour", "2 tbsp"), ("Onion", "1"), ("Spices", "1 tsp")],
    ),
    _dish(
        "fallback-dinner-005", "Greek Salad", "Side",
        "Cut the vegetables into cubes. Add feta and olives. Dress with olive oil.",
        [("Tomato", "2"), ("Cucumber", "1"), ("Feta", "100g"), ("Olives", "50g"), ("Olive Oil", "2 tbsp")],
        area="Greek",
    ),
)

FALLBACK_DISHES: MappingProxyType[Occasion, tuple[DishRecord, ...]] = MappingProxyType({
    Occasion.breakfast: _BREAKFAST,
    Occasion.lunch: _LUNCH,
    Occasion.dinner: _DINNER,
})

EMERGENCY_DISH = DishRecord(
    id="fallback-001",
    name="Simple Home-Cooked Dish",
    category="Miscellaneous",
    instructions="Cook a simple dish of your choice with what you have at hand.",
)


def get_fallback_dishes(occasion: Occasion) -> list[DishRecord]:
    return list(FALLBACK_DISHES.get(occasion, ()))
