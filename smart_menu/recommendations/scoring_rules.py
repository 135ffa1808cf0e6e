"""
Scoring weight tables.

All tables are read-only mappings built once at import; engines receive them
by reference and never mutate them.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .models import Occasion, ScoreCategory


@dataclass(frozen=True)
class OccasionWeights:
    cooking_time: Mapping[str, float]
    complexity: Mapping[str, float]
    nutrition: Mapping[str, float]
    category_bonus: Mapping[str, float]


def _weights(
    cooking_time: dict[str, float],
    complexity: dict[str, float],
    nutrition: dict[str, float],
    category_bonus: dict[str, float],
) -> OccasionWeights:
    return OccasionWeights(
        cooking_time=MappingProxyType(cooking_time),
        complexity=MappingProxyType(complexity),
        nutrition=MappingProxyType(nutrition),
        category_bonus=MappingProxyType(category_bonus),
    )


# Breakfast favours quick, simple and sweet; lunch medium-effort balanced and
# hearty dishes; dinner quick, simple and light.
OCCASION_WEIGHTS: Mapping[Occasion, OccasionWeights] = MappingProxyType({
    Occasion.breakfast: _weights(
        cooking_time={"quick": 5, "medium": 3, "long": 1},
        complexity={"simple": 5, "medium": 3, "complex": 1},
        nutrition={
            "highCarb": 4, "balanced": 3, "highProtein": 2,
            "lowCalorie": 2, "sweet": 4, "hearty": 2,
        },
        category_bonus={"Breakfast": 3, "Dessert": 2, "Miscellaneous": 1},
    ),
    Occasion.lunch: _weights(
        cooking_time={"quick": 3, "medium": 5, "long": 2},
        complexity={"simple": 2, "medium": 5, "complex": 3},
        nutrition={
            "highCarb": 3, "balanced": 5, "highProtein": 4,
            "lowCalorie": 2, "hearty": 4, "sweet": 1,
        },
        category_bonus={"Beef": 3, "Chicken": 3, "Pasta": 3, "Seafood": 2, "Pork": 2},
    ),
    Occasion.dinner: _weights(
        cooking_time={"quick": 5, "medium": 4, "long": 2},
        complexity={"simple": 5, "medium": 3, "complex": 1},
        nutrition={
            "highCarb": 2, "balanced": 4, "highProtein": 3,
            "lowCalorie": 5, "hearty": 2, "sweet": 1,
        },
        category_bonus={"Seafood": 3, "Vegetarian": 3, "Chicken": 2, "Side": 2, "Starter": 2},
    ),
})

UNKNOWN_TIME_SCORE = 2

# Context group -> dish trait -> bonus. Every group whose condition holds is
# applied, and within a group only the traits the dish has are awarded.
CONTEXT_MODIFIERS: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "early_morning": MappingProxyType({"quick": 2, "simple": 1, "energizing": 1}),
    "late_evening": MappingProxyType({"light": 2, "quick": 2, "comforting": 1}),
    "weekend": MappingProxyType({"complex": 1, "experimental": 1, "long_cooking": 1}),
    "weekday": MappingProxyType({"quick": 1, "simple": 1, "reliable": 1}),
    "high_urgency": MappingProxyType({"quick": 3, "simple": 2, "familiar": 1}),
    "low_urgency": MappingProxyType({"complex": 1, "experimental": 2, "quality": 1}),
})

BONUSES: Mapping[str, float] = MappingProxyType({
    "favorite": 10,
    "preferred_category": 3,
    "dietary_match": 2,
    "variety": 1,
    "healthy_cooking": 1,
    "balanced": 1,
    "preferred_cuisine": 3,
    "popular_cuisine": 0.5,
})

PENALTIES: Mapping[str, float] = MappingProxyType({
    "too_long": -3,
    "very_long": -5,
    "too_complex": -2,
    "very_complex": -4,
    "disliked_ingredient": -10,
    "blacklisted": -100,
    "recently_shown": -5,
    "time_inappropriate": -2,
})

PREFERRED_CATEGORY_MIN_PRIORITY = 7
VARIETY_HISTORY_WINDOW = 5

LONG_COOKING_MINUTES = 90
VERY_LONG_COOKING_MINUTES = 120
HIGH_COMPLEXITY = 15
VERY_HIGH_COMPLEXITY = 18

# Trait predicates used by the context modifiers.
QUICK_TRAIT_MAX_MINUTES = 30
SIMPLE_TRAIT_MAX_COMPLEXITY = 5
COMPLEX_TRAIT_MIN_COMPLEXITY = 10
LONG_TRAIT_MIN_MINUTES = 60

SCORE_THRESHOLDS: tuple[tuple[float, ScoreCategory], ...] = (
    (15, ScoreCategory.excellent),
    (10, ScoreCategory.good),
    (5, ScoreCategory.average),
    (2, ScoreCategory.poor),
)


def get_score_category(score: float) -> ScoreCategory:
    for threshold, category in SCORE_THRESHOLDS:
        if score >= threshold:
            return category
    return ScoreCategory.minimal
