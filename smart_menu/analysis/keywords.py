from __future__ import annotations

from types import MappingProxyType

PROTEINS: tuple[str, ...] = (
    "chicken", "beef", "pork", "fish", "salmon", "tuna", "shrimp",
    "turkey", "lamb", "duck", "eggs", "tofu", "beans", "lentils",
)

VEGETARIAN_PROTEINS: frozenset[str] = frozenset({"tofu", "beans", "lentils", "eggs"})
SEAFOOD_PROTEINS: frozenset[str] = frozenset({"fish", "salmon", "tuna", "shrimp"})

VEGETABLES: tuple[str, ...] = (
    "onion", "garlic", "tomato", "carrot", "potato", "pepper",
    "mushroom", "spinach", "broccoli", "cucumber", "lettuce",
)

# Declaration order breaks ties between families.
COOKING_METHODS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType({
    "healthy": ("steam", "grill", "bake", "roast", "poach"),
    "quick": ("fry", "sauté", "stir", "microwave"),
    "slow": ("braise", "stew", "slow cook", "marinate"),
})

ADVANCED_TECHNIQUES: tuple[str, ...] = (
    "marinate", "braise", "confit", "sous vide", "flambé", "julienne",
    "brunoise", "chiffonade", "fold", "whip", "emulsify", "reduce",
    "caramelize", "tempering", "proof", "knead",
)

SPECIAL_EQUIPMENT: tuple[str, ...] = (
    "food processor", "stand mixer", "mandoline", "thermometer",
    "double boiler", "mortar", "pestle", "pressure cooker",
)

STEP_VERBS: tuple[str, ...] = (
    "add", "mix", "cook", "heat", "bake", "fry", "boil", "stir", "pour", "cut", "chop", "slice",
)

CARBS: tuple[str, ...] = ("rice", "pasta", "bread", "potato", "flour", "sugar", "honey")
FATS: tuple[str, ...] = ("oil", "butter", "cream", "cheese", "nuts", "avocado")
SWEETS: tuple[str, ...] = (
    "sugar", "honey", "syrup", "chocolate", "jam", "vanilla", "cinnamon", "banana", "berries",
)
