from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ..analysis.analyzer import CalorieEstimator, analyze_dish
from ..catalog.categories import get_category_priority, is_popular_cuisine
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .context import is_time_appropriate
from .filters import has_disliked_ingredient
from .models import (
    Context,
    DietaryRestriction,
    DishAnalysis,
    DishRecord,
    NutritionProfile,
    Occasion,
    ScoreCategory,
    ScoredCandidate,
    Urgency,
    UserPreferences,
)
from .scoring_rules import (
    BONUSES,
    COMPLEX_TRAIT_MIN_COMPLEXITY,
    CONTEXT_MODIFIERS,
    HIGH_COMPLEXITY,
    LONG_COOKING_MINUTES,
    LONG_TRAIT_MIN_MINUTES,
    OCCASION_WEIGHTS,
    PENALTIES,
    PREFERRED_CATEGORY_MIN_PRIORITY,
    QUICK_TRAIT_MAX_MINUTES,
    SIMPLE_TRAIT_MAX_COMPLEXITY,
    UNKNOWN_TIME_SCORE,
    VARIETY_HISTORY_WINDOW,
    VERY_HIGH_COMPLEXITY,
    VERY_LONG_COOKING_MINUTES,
    get_score_category,
)

logger = logging.getLogger(__name__)


# ── Base score ───────────────────────────────────────────────────────────


def _nutrition_score(analysis: DishAnalysis, weights) -> float:
    nutrition = analysis.nutrition
    table = weights.nutrition
    score = 0.0
    if nutrition.is_balanced:
        score += table.get("balanced", 0)
    if nutrition.profile is NutritionProfile.high_carb:
        score += table.get("highCarb", 0)
    if nutrition.profile is NutritionProfile.high_protein:
        score += table.get("highProtein", 0)
    if nutrition.is_light:
        score += table.get("lowCalorie", 0)
    if nutrition.is_hearty:
        score += table.get("hearty", 0)
    if nutrition.is_sweet:
        score += table.get("sweet", 0)
    return score


def calculate_base_score(dish: DishRecord, analysis: DishAnalysis, occasion: Occasion) -> float:
    """Time fit + complexity fit + nutrition fit + category affinity for *occasion*."""
    weights = OCCASION_WEIGHTS.get(occasion, OCCASION_WEIGHTS[Occasion.lunch])

    if analysis.cooking_time:
        score = weights.cooking_time.get(analysis.time_category, 0)
    else:
        score = UNKNOWN_TIME_SCORE
    score += weights.complexity.get(analysis.complexity_category, 0)
    score += _nutrition_score(analysis, weights)
    score += weights.category_bonus.get(dish.category, 0)
    return float(score)


# ── Context modifiers ────────────────────────────────────────────────────


def dish_traits(dish: DishRecord, analysis: DishAnalysis) -> set[str]:
    """Traits the context modifiers can reward."""
    nutrition = analysis.nutrition
    time = analysis.cooking_time
    familiar = not dish.area or is_popular_cuisine(dish.area)

    traits: set[str] = set()
    if analysis.is_quick or 0 < time <= QUICK_TRAIT_MAX_MINUTES:
        traits.add("quick")
    if analysis.complexity <= SIMPLE_TRAIT_MAX_COMPLEXITY:
        traits.add("simple")
    if analysis.complexity > COMPLEX_TRAIT_MIN_COMPLEXITY:
        traits.add("complex")
    if time > LONG_TRAIT_MIN_MINUTES:
        traits.add("long_cooking")
    if nutrition.is_light or nutrition.profile is NutritionProfile.low_calorie:
        traits.add("light")
    if nutrition.is_hearty:
        traits.add("comforting")
    if nutrition.is_sweet or nutrition.profile in (
        NutritionProfile.high_carb, NutritionProfile.high_protein,
    ):
        traits.add("energizing")
    if familiar:
        traits.update({"reliable", "familiar"})
    else:
        traits.add("experimental")
    if nutrition.is_balanced:
        traits.add("quality")
    return traits


def active_context_groups(context: Context) -> list[str]:
    groups = []
    if context.is_early_morning:
        groups.append("early_morning")
    if context.is_late_evening:
        groups.append("late_evening")
    groups.append("weekend" if context.is_weekend else "weekday")
    if context.urgency is Urgency.high:
        groups.append("high_urgency")
    elif context.urgency is Urgency.low:
        groups.append("low_urgency")
    return groups


def calculate_context_modifiers(dish: DishRecord, analysis: DishAnalysis, context: Context) -> float:
    traits = dish_traits(dish, analysis)
    total = 0.0
    for group in active_context_groups(context):
        for trait, bonus in CONTEXT_MODIFIERS[group].items():
            if trait in traits:
                total += bonus
    return total


# ── Bonuses & penalties ──────────────────────────────────────────────────


def matches_dietary_preferences(analysis: DishAnalysis, restrictions: Sequence[DietaryRestriction]) -> bool:
    profile = analysis.nutrition.profile
    for restriction in restrictions:
        if restriction is DietaryRestriction.vegetarian and not analysis.is_vegetarian:
            return False
        if restriction is DietaryRestriction.low_carb and profile is NutritionProfile.high_carb:
            return False
        if restriction is DietaryRestriction.high_protein and profile is not NutritionProfile.high_protein:
            return False
        if restriction is DietaryRestriction.pescatarian and not (
            analysis.is_vegetarian or analysis.is_seafood
        ):
            return False
    return True


def calculate_bonuses(
    dish: DishRecord,
    analysis: DishAnalysis,
    occasion: Occasion,
    prefs: UserPreferences,
) -> float:
    bonus = 0.0

    if dish.id in prefs.favorite_ids:
        bonus += BONUSES["favorite"]

    if get_category_priority(dish.category, occasion) > PREFERRED_CATEGORY_MIN_PRIORITY:
        bonus += BONUSES["preferred_category"]

    if prefs.dietary_restrictions and matches_dietary_preferences(analysis, prefs.dietary_restrictions):
        bonus += BONUSES["dietary_match"]

    if prefs.history:
        recent_categories = {h.category for h in prefs.history[:VARIETY_HISTORY_WINDOW]}
        if dish.category not in recent_categories:
            bonus += BONUSES["variety"]

    if analysis.is_healthy_cooking:
        bonus += BONUSES["healthy_cooking"]
    if analysis.nutrition.is_balanced:
        bonus += BONUSES["balanced"]

    if dish.area and dish.area in prefs.preferred_cuisines:
        bonus += BONUSES["preferred_cuisine"]
        if is_popular_cuisine(dish.area):
            bonus += BONUSES["popular_cuisine"]

    return bonus


def _shown_recently(dish_id: str, prefs: UserPreferences, days: int, now: datetime) -> bool:
    cutoff = now - timedelta(days=days)
    for entry in prefs.history:
        viewed = entry.viewed_at
        if viewed.tzinfo is None:
            viewed = viewed.replace(tzinfo=timezone.utc)
        if entry.id == dish_id and viewed > cutoff:
            return True
    return False


def calculate_penalties(
    dish: DishRecord,
    analysis: DishAnalysis,
    prefs: UserPreferences,
    context: Context,
    now: datetime | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> float:
    penalty = 0.0
    time = analysis.cooking_time

    if time > LONG_COOKING_MINUTES:
        penalty += PENALTIES["too_long"]
    if time > VERY_LONG_COOKING_MINUTES:
        penalty += PENALTIES["very_long"]
    if analysis.complexity > HIGH_COMPLEXITY:
        penalty += PENALTIES["too_complex"]
    if analysis.complexity > VERY_HIGH_COMPLEXITY:
        penalty += PENALTIES["very_complex"]

    if has_disliked_ingredient(dish, prefs.disliked_ingredients):
        penalty += PENALTIES["disliked_ingredient"]
    if dish.id in prefs.blacklist_ids:
        penalty += PENALTIES["blacklisted"]

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if _shown_recently(dish.id, prefs, config.repeat_avoidance_days, now):
        penalty += PENALTIES["recently_shown"]

    if not is_time_appropriate(time, context):
        penalty += PENALTIES["time_inappropriate"]

    return penalty


# ── Entry points ─────────────────────────────────────────────────────────


def score_dish(
    dish: DishRecord,
    analysis: DishAnalysis,
    occasion: Occasion,
    prefs: UserPreferences,
    context: Context,
    now: datetime | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> float:
    """Total desirability score, never below 0."""
    score = (
        calculate_base_score(dish, analysis, occasion)
        + calculate_context_modifiers(dish, analysis, context)
        + calculate_bonuses(dish, analysis, occasion, prefs)
        + calculate_penalties(dish, analysis, prefs, context, now=now, config=config)
    )
    return round(max(score, 0.0), 2)


def _minimal(dish: DishRecord) -> ScoredCandidate:
    return ScoredCandidate(dish=dish, analysis=None, score=0.0, score_category=ScoreCategory.minimal)


def score_candidate(
    dish: DishRecord,
    occasion: Occasion,
    prefs: UserPreferences,
    context: Context,
    calorie_estimator: CalorieEstimator | None = None,
    now: datetime | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> ScoredCandidate:
    """Analyze and score one dish. A failure yields a 0 / minimal candidate instead of raising."""
    try:
        analysis = analyze_dish(dish, occasion, calorie_estimator=calorie_estimator)
        score = score_dish(dish, analysis, occasion, prefs, context, now=now, config=config)
    except Exception:
        logger.warning("Scoring failed for dish %s, marking it minimal", dish.id, exc_info=True)
        return _minimal(dish)
    return ScoredCandidate(
        dish=dish,
        analysis=analysis,
        score=score,
        score_category=get_score_category(score),
    )


async def score_candidates(
    dishes: Sequence[DishRecord],
    occasion: Occasion,
    prefs: UserPreferences,
    context: Context,
    calorie_estimator: CalorieEstimator | None = None,
    now: datetime | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[ScoredCandidate]:
    """Score every dish concurrently; one item's failure never affects the others."""
    results = await asyncio.gather(
        *(
            asyncio.to_thread(
                score_candidate, dish, occasion, prefs, context,
                calorie_estimator, now, config,
            )
            for dish in dishes
        ),
        return_exceptions=True,
    )

    scored: list[ScoredCandidate] = []
    for dish, result in zip(dishes, results):
        if isinstance(result, BaseException):
            logger.warning("Scoring task for dish %s raised %r", dish.id, result)
            scored.append(_minimal(dish))
        else:
            scored.append(result)
    return scored


def filter_viable(
    scored: Sequence[ScoredCandidate],
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[ScoredCandidate]:
    return [c for c in scored if c.score >= config.min_dish_score]
