"""
Hard and soft candidate filters.

Hard filters run before scoring and exclude unconditionally. Soft filters run
after scoring; the caller is expected to discard their result when it would
leave nothing to choose from.

Dietary checks are plain substring matches over the ingredient text, so
"chicken stock" excludes a dish for vegetarians even where a vegetable stock
would do. That approximation is kept deliberately simple.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence

from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import DietaryRestriction, DishRecord, ScoredCandidate, UserPreferences

logger = logging.getLogger(__name__)

MEAT_KEYWORDS: tuple[str, ...] = (
    "beef", "pork", "chicken", "turkey", "lamb", "duck", "bacon", "ham",
    "sausage", "ground beef", "ground pork", "mince",
)
LAND_MEAT_KEYWORDS: tuple[str, ...] = tuple(k for k in MEAT_KEYWORDS if k != "mince")
ANIMAL_PRODUCT_KEYWORDS: tuple[str, ...] = (
    "milk", "cheese", "butter", "cream", "yogurt", "egg", "honey",
    "fish", "salmon", "tuna", "shrimp", "crab", "lobster",
)
GLUTEN_KEYWORDS: tuple[str, ...] = (
    "wheat", "flour", "bread", "pasta", "noodles", "barley", "rye",
    "soy sauce", "worcestershire",
)
DAIRY_KEYWORDS: tuple[str, ...] = (
    "milk", "cheese", "butter", "cream", "yogurt", "sour cream",
    "parmesan", "mozzarella", "cheddar",
)
NUT_KEYWORDS: tuple[str, ...] = (
    "almond", "walnut", "peanut", "cashew", "pistachio", "hazelnut",
    "pecan", "brazil nut", "pine nut",
)

# Restriction -> keywords whose presence excludes the dish. Restrictions that
# only steer scoring (lowCarb, highProtein) have no entry.
DIETARY_EXCLUSIONS: Mapping[DietaryRestriction, tuple[str, ...]] = MappingProxyType({
    DietaryRestriction.vegetarian: MEAT_KEYWORDS,
    DietaryRestriction.vegan: MEAT_KEYWORDS + ANIMAL_PRODUCT_KEYWORDS,
    DietaryRestriction.pescatarian: LAND_MEAT_KEYWORDS,
    DietaryRestriction.gluten_free: GLUTEN_KEYWORDS,
    DietaryRestriction.dairy_free: DAIRY_KEYWORDS,
    DietaryRestriction.nut_free: NUT_KEYWORDS,
})


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(w in text for w in words)


def meets_dietary_restrictions(dish: DishRecord, restrictions: Iterable[DietaryRestriction]) -> bool:
    text = dish.ingredients_text()
    for restriction in restrictions:
        excluded = DIETARY_EXCLUSIONS.get(restriction)
        if excluded and _contains_any(text, excluded):
            return False
    return True


def has_disliked_ingredient(dish: DishRecord, disliked: Iterable[str]) -> bool:
    text = dish.ingredients_text()
    return any(d and d.lower() in text for d in disliked)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _recent_history_ids(prefs: UserPreferences, days: int, now: datetime) -> set[str]:
    cutoff = _as_utc(now) - timedelta(days=days)
    return {h.id for h in prefs.history if _as_utc(h.viewed_at) > cutoff}


def _store_check(check: Callable[[str], bool], dish_id: str, what: str) -> bool:
    try:
        return bool(check(dish_id))
    except Exception:
        logger.warning("Preference store %s check failed for %s", what, dish_id, exc_info=True)
        return False


def filter_hard(
    candidates: Sequence[DishRecord],
    prefs: UserPreferences,
    store=None,
    now: datetime | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[DishRecord]:
    """
    Drop candidates that must never be served.

    Exclusions: blacklisted (in *prefs* or in *store*), any disliked
    ingredient, a dietary restriction violation, or shown within the last
    ``config.repeat_avoidance_days`` days (per *store* and per ``prefs.history``).
    The result is always a subset of *candidates*, in the same order.
    """
    now = now or datetime.now(timezone.utc)
    days = config.repeat_avoidance_days
    blacklist = prefs.blacklist_ids
    recent = _recent_history_ids(prefs, days, now)

    kept: list[DishRecord] = []
    for dish in candidates:
        if dish.id in blacklist:
            continue
        if store is not None and _store_check(store.is_blacklisted, dish.id, "blacklist"):
            continue
        if has_disliked_ingredient(dish, prefs.disliked_ingredients):
            continue
        if not meets_dietary_restrictions(dish, prefs.dietary_restrictions):
            continue
        if dish.id in recent:
            continue
        if store is not None and _store_check(
            lambda dish_id: store.shown_within(dish_id, days), dish.id, "history"
        ):
            continue
        kept.append(dish)

    logger.debug("Hard filter kept %d of %d candidates", len(kept), len(candidates))
    return kept


def filter_soft(scored: Sequence[ScoredCandidate], prefs: UserPreferences) -> list[ScoredCandidate]:
    """Keep candidates matching the preferred complexity and the cooking-time ceiling."""
    result = list(scored)

    if prefs.preferred_complexity != "any":
        result = [
            c for c in result
            if c.analysis is None or c.analysis.complexity_category == prefs.preferred_complexity
        ]

    if prefs.max_cooking_time:
        limit = prefs.max_cooking_time
        result = [
            c for c in result
            if c.analysis is None
            or not c.analysis.cooking_time
            or c.analysis.cooking_time <= limit
        ]

    return result
