"""
Recipe analyzer.

Derives structured attributes (cooking time, complexity, protein and
vegetable tags, cooking method, nutrition profile) from a raw catalog record
using keyword vocabularies and regular expressions only. The single outside
call is the optional calorie estimator, whose failures are swallowed into an
"undetermined" estimate.
"""
from __future__ import annotations

import logging
import re
from typing import Callable

from ..errors import AnalysisError
from ..recommendations.models import (
    CalorieEstimate,
    CookingMethodCategory,
    DishAnalysis,
    DishRecord,
    NutritionAnalysis,
    NutritionProfile,
    Occasion,
)
from . import keywords

logger = logging.getLogger(__name__)

CalorieEstimator = Callable[[DishRecord, Occasion], CalorieEstimate]

MAX_COOKING_TIME = 720
MAX_COMPLEXITY = 20
OVERNIGHT_MINUTES = 480
ALL_DAY_MINUTES = 360
MIN_STEP_LENGTH = 10

QUICK_TIME_MAX = 20
MEDIUM_TIME_MAX = 45
SIMPLE_COMPLEXITY_MAX = 5
MEDIUM_COMPLEXITY_MAX = 10

_MINUTES_RE = re.compile(r"(\d+)(?:\s*-\s*(\d+))?\s*(?:minutes?|mins?)\b")
_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?)\b")
_HOURS_MINUTES_RE = re.compile(
    r"(\d+)\s*(?:hours?|hrs?)\s*(?:and\s*)?(\d+)\s*(?:minutes?|mins?)\b"
)
_OVERNIGHT_RE = re.compile(r"overnight")
_ALL_DAY_RE = re.compile(r"all\s*day")

_STEP_SPLIT_RE = re.compile(r"[.!?]|\d+\.\s*|\n+")
_STEP_VERB_RE = re.compile(r"\b(?:" + "|".join(keywords.STEP_VERBS) + r")\b", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Cooking time
# ---------------------------------------------------------------------------


def extract_cooking_time(instructions: str | None) -> int:
    """
    Scan free-text instructions for time expressions.

    Every match is collected and the largest wins, since a recipe's total
    time is at least its longest step. Result is clamped to [0, 720];
    0 means "unknown".
    """
    if not instructions or not isinstance(instructions, str):
        return 0

    text = instructions.lower()
    found: list[float] = []

    for match in _MINUTES_RE.finditer(text):
        low = int(match.group(1))
        high = int(match.group(2)) if match.group(2) else low
        found.append(max(low, high))

    for match in _HOURS_RE.finditer(text):
        found.append(float(match.group(1)) * 60)

    for match in _HOURS_MINUTES_RE.finditer(text):
        found.append(int(match.group(1)) * 60 + int(match.group(2)))

    if _OVERNIGHT_RE.search(text):
        found.append(OVERNIGHT_MINUTES)
    if _ALL_DAY_RE.search(text):
        found.append(ALL_DAY_MINUTES)

    total = max(found) if found else 0
    return int(min(max(round(total), 0), MAX_COOKING_TIME))


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------


def count_cooking_steps(instructions: str | None) -> int:
    """Count sentence-like segments that contain a cooking verb (at least 1)."""
    if not instructions:
        return 0
    segments = _STEP_SPLIT_RE.split(instructions)
    steps = [
        s for s in segments
        if s and len(s.strip()) > MIN_STEP_LENGTH and _STEP_VERB_RE.search(s)
    ]
    return max(len(steps), 1)


def _ingredient_points(count: int) -> int:
    if count <= 5:
        return 1
    if count <= 10:
        return 3
    if count <= 15:
        return 5
    return 8


def _step_points(steps: int) -> int:
    if steps <= 3:
        return 1
    if steps <= 6:
        return 2
    if steps <= 10:
        return 4
    return 6


def calculate_complexity(dish: DishRecord) -> int:
    """Additive 0-20 score: ingredients + steps + techniques + equipment."""
    instructions = dish.instructions or ""
    text = instructions.lower()

    complexity = _ingredient_points(len(dish.ingredients))
    complexity += _step_points(count_cooking_steps(instructions))
    complexity += sum(1 for t in keywords.ADVANCED_TECHNIQUES if t in text)
    complexity += sum(1 for e in keywords.SPECIAL_EQUIPMENT if e in text)

    return min(max(complexity, 0), MAX_COMPLEXITY)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def detect_proteins(dish: DishRecord) -> set[str]:
    text = dish.ingredients_text(include_name=True)
    return {p for p in keywords.PROTEINS if p in text}


def detect_vegetables(dish: DishRecord) -> set[str]:
    text = dish.ingredients_text(include_name=True)
    return {v for v in keywords.VEGETABLES if v in text}


def count_vegetables(dish: DishRecord) -> int:
    return len(detect_vegetables(dish))


def detect_cooking_method(instructions: str | None) -> tuple[list[str], CookingMethodCategory]:
    """
    Match instructions against the healthy/quick/slow families.

    The family with the most hits wins; ties go to the family declared first.
    """
    if not instructions:
        return [], CookingMethodCategory.unknown

    text = instructions.lower()
    methods: list[str] = []
    best: str | None = None
    best_hits = 0
    for family, vocabulary in keywords.COOKING_METHODS.items():
        hits = [m for m in vocabulary if m in text]
        methods.extend(hits)
        if len(hits) > best_hits:
            best, best_hits = family, len(hits)

    if best is None:
        return methods, CookingMethodCategory.unknown
    return methods, CookingMethodCategory(best)


def analyze_nutrition(dish: DishRecord, proteins: set[str] | None = None) -> NutritionAnalysis:
    text = dish.ingredients_text(include_name=True)

    carb_count = sum(1 for k in keywords.CARBS if k in text)
    protein_count = len(proteins if proteins is not None else detect_proteins(dish))
    vegetable_count = count_vegetables(dish)
    fat_count = sum(1 for k in keywords.FATS if k in text)
    is_sweet = any(k in text for k in keywords.SWEETS)

    if carb_count > protein_count + vegetable_count:
        profile = NutritionProfile.high_carb
    elif protein_count > carb_count + vegetable_count:
        profile = NutritionProfile.high_protein
    elif vegetable_count > carb_count + protein_count:
        profile = NutritionProfile.low_calorie
    elif fat_count > 2:
        profile = NutritionProfile.high_fat
    else:
        profile = NutritionProfile.balanced

    return NutritionAnalysis(
        carb_count=carb_count,
        protein_count=protein_count,
        vegetable_count=vegetable_count,
        fat_count=fat_count,
        profile=profile,
        is_balanced=carb_count > 0 and protein_count > 0 and vegetable_count > 0,
        is_light=vegetable_count > carb_count + protein_count,
        is_hearty=protein_count + carb_count > vegetable_count * 2,
        is_sweet=is_sweet,
    )


def _safe_estimate(
    dish: DishRecord,
    occasion: Occasion,
    estimator: CalorieEstimator | None,
) -> CalorieEstimate:
    if estimator is None:
        return CalorieEstimate.undetermined()
    try:
        return estimator(dish, occasion)
    except Exception:
        logger.warning("Calorie estimator raised for dish %s", dish.id, exc_info=True)
        return CalorieEstimate.undetermined()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def analyze_dish(
    dish: DishRecord,
    occasion: Occasion = Occasion.lunch,
    calorie_estimator: CalorieEstimator | None = None,
) -> DishAnalysis:
    """Full analysis of one record. Deterministic apart from ``analyzed_at``."""
    if not isinstance(dish, DishRecord):
        raise AnalysisError(f"Expected DishRecord, got {type(dish).__name__}")

    cooking_time = extract_cooking_time(dish.instructions)
    complexity = calculate_complexity(dish)
    proteins = detect_proteins(dish)
    methods, cooking_category = detect_cooking_method(dish.instructions)
    nutrition = analyze_nutrition(dish, proteins)

    if cooking_time <= QUICK_TIME_MAX:
        time_category = "quick"
    elif cooking_time <= MEDIUM_TIME_MAX:
        time_category = "medium"
    else:
        time_category = "long"

    if complexity <= SIMPLE_COMPLEXITY_MAX:
        complexity_category = "simple"
    elif complexity <= MEDIUM_COMPLEXITY_MAX:
        complexity_category = "medium"
    else:
        complexity_category = "complex"

    return DishAnalysis(
        cooking_time=cooking_time,
        complexity=complexity,
        time_category=time_category,
        complexity_category=complexity_category,
        proteins=sorted(proteins),
        vegetable_count=nutrition.vegetable_count,
        ingredient_count=len(dish.ingredients),
        cooking_methods=methods,
        cooking_category=cooking_category,
        is_healthy_cooking=cooking_category is CookingMethodCategory.healthy,
        is_quick_cooking=cooking_category is CookingMethodCategory.quick,
        nutrition=nutrition,
        calories=_safe_estimate(dish, occasion, calorie_estimator),
        is_vegetarian=not proteins or proteins <= keywords.VEGETARIAN_PROTEINS,
        is_seafood=bool(proteins & keywords.SEAFOOD_PROTEINS),
        is_quick=cooking_time <= 30 and complexity <= 5,
        is_complex=complexity > 10 or cooking_time > 60,
    )
