"""
Offline calorie calculator.

Sums per-ingredient energy from a per-100g table, converting each measure
("1 1/2 cups", "200g", "2 tbsp") to grams, then scales the total by the
richest cooking method found in the instructions. Dishes without ingredients
get a flat estimate for their category. The figure is for the whole recipe,
not a single serving.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType

from ..recommendations.models import CalorieEstimate, DishRecord, Occasion

logger = logging.getLogger(__name__)

LOW_CALORIE_MAX = 400
MODERATE_CALORIE_MAX = 700

DEFAULT_GRAMS = 100.0
TRACE_GRAMS = 2.0
UNKNOWN_INGREDIENT_KCAL = 100

# kcal per 100 g
CALORIES_PER_100G: MappingProxyType[str, int] = MappingProxyType({
    # meat and poultry
    "chicken": 165, "chicken breast": 165, "chicken thigh": 209, "chicken drumstick": 172,
    "beef": 250, "ground beef": 254, "pork": 242, "bacon": 541, "turkey": 135,
    "lamb": 294, "sausage": 301, "ham": 145,
    # fish and seafood
    "fish": 140, "white fish": 100, "salmon": 208, "tuna": 144, "cod": 82,
    "shrimp": 99, "prawn": 99, "crab": 97, "lobster": 89, "mussels": 172,
    "sardines": 208, "mackerel": 305,
    # dairy and eggs
    "milk": 42, "butter": 717, "cheese": 113, "cheddar cheese": 403, "mozzarella": 300,
    "parmesan": 431, "cream cheese": 342, "yogurt": 59, "sour cream": 193,
    "heavy cream": 340, "double cream": 340, "cream": 340, "egg": 155, "egg white": 52,
    "egg yolk": 322,
    # grains
    "rice": 130, "brown rice": 112, "pasta": 131, "spaghetti": 131, "noodles": 138,
    "bread": 265, "flour": 364, "whole wheat flour": 340, "oats": 389, "quinoa": 120,
    "barley": 123, "couscous": 112, "yeast": 325, "baking powder": 53, "baking soda": 0,
    # vegetables
    "potato": 77, "sweet potato": 86, "tomato": 18, "onion": 40, "garlic": 149,
    "carrot": 41, "broccoli": 34, "spinach": 23, "lettuce": 15, "cucumber": 16,
    "bell pepper": 31, "mushroom": 22, "zucchini": 17, "courgette": 17, "eggplant": 25,
    "aubergine": 25, "cabbage": 25, "cauliflower": 25, "celery": 14, "corn": 86,
    "peas": 81, "green beans": 31,
    # fruit
    "apple": 52, "banana": 89, "orange": 47, "lemon": 29, "lime": 30, "strawberry": 32,
    "blueberry": 57, "grape": 62, "pineapple": 50, "mango": 60, "avocado": 160,
    "coconut": 354,
    # nuts and seeds
    "almond": 579, "walnut": 654, "peanut": 567, "cashew": 553, "pistachio": 560,
    "sunflower seeds": 584, "pumpkin seeds": 559, "peanut butter": 588,
    # oils
    "olive oil": 884, "vegetable oil": 884, "coconut oil": 862, "canola oil": 884,
    # herbs and spices
    "salt": 0, "pepper": 251, "paprika": 282, "cumin": 375, "oregano": 265,
    "basil": 233, "thyme": 276, "rosemary": 131, "parsley": 36, "cilantro": 23,
    "coriander": 23, "ginger": 80, "cinnamon": 247, "vanilla": 288,
    # sugars
    "sugar": 387, "brown sugar": 380, "honey": 304, "maple syrup": 260, "jam": 278,
    "chocolate": 546, "cocoa": 228,
    # legumes
    "lentils": 116, "chickpeas": 164, "black beans": 132, "kidney beans": 127,
    "beans": 31, "soybeans": 173, "tofu": 76,
    # liquids and sauces
    "water": 0, "stock": 7, "wine": 85, "beer": 43, "vinegar": 18, "soy sauce": 8,
    "tomato sauce": 29, "tomato puree": 82, "ketchup": 112, "mayonnaise": 680,
    "mustard": 66, "ice cream": 207,
})

# Fallback per-100g guesses for names missing from the table, first match wins.
INGREDIENT_FAMILIES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("meat", "steak", "mince"), 250),
    (("fish", "seafood"), 140),
    (("oil", "fat", "lard"), 884),
    (("nut", "seed"), 580),
    (("vegetable", "veggie"), 30),
    (("fruit", "berries"), 50),
)

# grams per unit, by ingredient keyword
UNIT_WEIGHTS: MappingProxyType[str, MappingProxyType[str, float]] = MappingProxyType({
    "cup": MappingProxyType({
        "flour": 125, "brown sugar": 213, "sugar": 200, "rice": 185, "milk": 240,
        "water": 240, "oil": 218, "butter": 227, "default": 240,
    }),
    "tablespoon": MappingProxyType({
        "flour": 8, "sugar": 12, "oil": 14, "butter": 14, "honey": 21, "default": 15,
    }),
    "teaspoon": MappingProxyType({"salt": 6, "sugar": 4, "oil": 5, "default": 5}),
    "piece": MappingProxyType({
        "egg": 50, "banana": 120, "apple": 150, "orange": 130, "potato": 150,
        "tomato": 100, "onion": 110, "garlic": 3, "default": 100,
    }),
    "slice": MappingProxyType({"bread": 25, "cheese": 20, "bacon": 15, "ham": 30, "default": 25}),
    "can": MappingProxyType({"tomato": 400, "beans": 400, "tuna": 150, "default": 400}),
    "head": MappingProxyType({"lettuce": 500, "cabbage": 900, "garlic": 40, "default": 500}),
    "bunch": MappingProxyType({"spinach": 100, "parsley": 30, "cilantro": 25, "default": 50}),
    "handful": MappingProxyType({"nut": 30, "seed": 25, "default": 30}),
})

# Weight and volume units, checked before count units so "1 (14 oz) can" is
# 14 oz. The amount is the number written right before the unit, unless that
# number ends a fraction, in which case the leading quantity is used.
def _unit_pattern(unit: str) -> re.Pattern[str]:
    return re.compile(r"(?:(?<![\d/.])(\d+(?:\.\d+)?))?\s*(?<![a-z])(?:" + unit + r")\b")


_MASS_UNITS: tuple[tuple[float, re.Pattern[str]], ...] = (
    (1000.0, _unit_pattern(r"kg|kilograms?")),
    (1.0, _unit_pattern(r"g|grams?")),
    (1.0, _unit_pattern(r"ml|millilit(?:er|re)s?")),
    (1000.0, _unit_pattern(r"l|lit(?:er|re)s?")),
    (28.35, _unit_pattern(r"oz|ounces?")),
    (453.6, _unit_pattern(r"lbs?|pounds?")),
)

_COUNT_UNITS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("cup", re.compile(r"\bcups?\b")),
    ("tablespoon", re.compile(r"(?<![a-z])(tbsp?s?|tablespoons?)\b")),
    ("teaspoon", re.compile(r"(?<![a-z])(tsps?|teaspoons?)\b")),
    ("slice", re.compile(r"\bslices?\b")),
    ("can", re.compile(r"\b(cans?|tins?)\b")),
    ("head", re.compile(r"\bheads?\b")),
    ("bunch", re.compile(r"\bbunch(es)?\b")),
    ("handful", re.compile(r"\bhandfuls?\b")),
    ("piece", re.compile(r"\b(pieces?|whole|cloves?)\b")),
)

_TRACE = re.compile(r"\b(pinch|dash|taste|season\w*|sprinkl\w*)\b")

_UNICODE_FRACTIONS = MappingProxyType({"½": 0.5, "¼": 0.25, "¾": 0.75, "⅓": 1 / 3, "⅔": 2 / 3})
_MIXED_NUMBER = re.compile(r"^(\d+)\s+(\d+)/(\d+)")
_SIMPLE_NUMBER = re.compile(r"^(\d+(?:\.\d+)?)(?:/(\d+))?")
_BARE_NUMBER = re.compile(r"^[\d./\s½¼¾⅓⅔]+$")

# Most specific first: "deep fried" must win over "fried".
COOKING_MULTIPLIERS: tuple[tuple[str, float], ...] = (
    ("deep fr", 1.5),
    ("pan fr", 1.2),
    ("fried", 1.3),
    ("fry", 1.3),
    ("sauté", 1.15),
    ("saute", 1.15),
    ("roast", 1.1),
    ("grill", 1.05),
    ("bake", 1.05),
    ("broil", 0.95),
    ("boil", 1.0),
    ("steam", 1.0),
    ("poach", 1.0),
)
ADDED_FAT_MULTIPLIER = 1.2

CATEGORY_ESTIMATES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("dessert", "sweet"), 350),
    (("salad", "vegetarian", "vegan"), 250),
    (("soup", "starter"), 200),
    (("beef", "pork", "lamb", "goat", "meat"), 600),
    (("chicken", "poultry"), 450),
    (("fish", "seafood"), 300),
    (("pasta", "rice"), 400),
    (("breakfast",), 350),
)
DEFAULT_CATEGORY_ESTIMATE = 500


def calorie_category(calories: int | None) -> str:
    if calories is None:
        return "undetermined"
    if calories < LOW_CALORIE_MAX:
        return "low"
    if calories <= MODERATE_CALORIE_MAX:
        return "moderate"
    return "high"


def calories_per_100g(ingredient: str) -> int:
    """Exact table hit, else the longest table key inside the name, else a family guess."""
    name = ingredient.lower().strip()
    if not name:
        return 0
    if name in CALORIES_PER_100G:
        return CALORIES_PER_100G[name]

    matches = [key for key in CALORIES_PER_100G if key in name]
    if matches:
        return CALORIES_PER_100G[max(matches, key=len)]

    for words, kcal in INGREDIENT_FAMILIES:
        if any(w in name for w in words):
            return kcal
    return UNKNOWN_INGREDIENT_KCAL


def parse_quantity(measure: str) -> float:
    """Leading amount of a measure: "1 1/2" -> 1.5, "3/4" -> 0.75, "½" -> 0.5. Defaults to 1."""
    text = measure.strip()

    mixed = _MIXED_NUMBER.match(text)
    if mixed and int(mixed.group(3)):
        return int(mixed.group(1)) + int(mixed.group(2)) / int(mixed.group(3))

    simple = _SIMPLE_NUMBER.match(text)
    if simple:
        value = float(simple.group(1))
        if simple.group(2):
            denominator = int(simple.group(2))
            if not denominator:
                return 1.0
            value /= denominator
        if value <= 0:
            return 1.0
        rest = text[simple.end():].lstrip()
        if rest[:1] in _UNICODE_FRACTIONS:
            value += _UNICODE_FRACTIONS[rest[0]]
        return value

    if text[:1] in _UNICODE_FRACTIONS:
        return _UNICODE_FRACTIONS[text[0]]
    return 1.0


def _unit_weight(unit: str, ingredient: str) -> float:
    table = UNIT_WEIGHTS[unit]
    matches = [key for key in table if key != "default" and key in ingredient]
    if matches:
        return table[max(matches, key=len)]
    return table["default"]


def measure_to_grams(measure: str, ingredient: str = "") -> float:
    """
    Convert a free-text measure to grams.

    Unit words scale by the leading quantity; a bare number counts pieces;
    pinches and "to taste" are a fixed trace amount. An empty or unreadable
    measure is taken as one 100 g portion.
    """
    text = (measure or "").lower().strip()
    if not text:
        return DEFAULT_GRAMS
    if _TRACE.search(text):
        return TRACE_GRAMS
    ingredient = ingredient.lower()
    quantity = parse_quantity(text)

    for grams, pattern in _MASS_UNITS:
        found = pattern.search(text)
        if found:
            amount = float(found.group(1)) if found.group(1) else quantity
            return amount * grams

    for unit, pattern in _COUNT_UNITS:
        if pattern.search(text):
            return quantity * _unit_weight(unit, ingredient)

    if _BARE_NUMBER.match(text):
        return quantity * _unit_weight("piece", ingredient)
    return DEFAULT_GRAMS


def cooking_multiplier(instructions: str) -> float:
    text = (instructions or "").lower()
    for method, multiplier in COOKING_MULTIPLIERS:
        if method in text:
            return multiplier
    if "oil" in text or "butter" in text:
        return ADDED_FAT_MULTIPLIER
    return 1.0


def estimate_by_category(dish: DishRecord) -> CalorieEstimate:
    category = (dish.category or "").lower()
    calories = DEFAULT_CATEGORY_ESTIMATE
    for words, kcal in CATEGORY_ESTIMATES:
        if any(w in category for w in words):
            calories = kcal
            break
    return CalorieEstimate(calories=calories, category=calorie_category(calories))


def calculate_calories(dish: DishRecord, occasion: Occasion | str | None = None) -> CalorieEstimate:
    """Deterministic whole-recipe estimate. Usable anywhere a calorie estimator is expected."""
    if not dish.ingredients:
        return estimate_by_category(dish)

    total = sum(
        calories_per_100g(ing.name) * measure_to_grams(ing.measure, ing.name) / 100
        for ing in dish.ingredients
    )
    calories = round(total * cooking_multiplier(dish.instructions))
    logger.debug("Offline estimate for dish %s: %d kcal", dish.id, calories)
    return CalorieEstimate(calories=calories, category=calorie_category(calories))
