import random

import pytest

from smart_menu.analytics.store import get_events
from smart_menu.catalog.config import CatalogConfig
from smart_menu.catalog.fallback import get_fallback_dishes
from smart_menu.preferences.store import InMemoryPreferenceStore
from smart_menu.recommendations.models import (
    CalorieEstimate,
    Occasion,
    ResultStatus,
    SavedDish,
    ScoreCategory,
    UserPreferences,
)
from smart_menu.recommendations.retrieval import DishOrchestrator

from conftest import WEDNESDAY_EVENING, InMemoryGateway, make_dish

DINNER_DISHES = [
    make_dish("101", "Chicken Skewers", "Chicken"),
    make_dish("102", "Garlic Prawns", "Seafood", ingredients=("Shrimp", "Garlic", "Butter")),
    make_dish("103", "Lentil Soup", "Vegetarian", ingredients=("Lentils", "Carrot", "Onion")),
    make_dish("104", "Carbonara", "Pasta", area="Italian", ingredients=("Pasta", "Eggs", "Bacon")),
]


def _orchestrator(gateway, **kwargs):
    kwargs.setdefault("rng", random.Random(11))
    kwargs.setdefault("clock", lambda: WEDNESDAY_EVENING)
    return DishOrchestrator(gateway, **kwargs)


@pytest.mark.asyncio
async def test_primary_success():
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES)).get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.success
    assert len(envelope.dishes) == 1
    assert envelope.dish.dish.id in {d.id for d in DINNER_DISHES}
    assert envelope.dish.analysis is not None
    assert envelope.dish.score > 0
    assert envelope.metadata.tier == "primary"
    assert envelope.metadata.total_dishes_found == 4
    assert envelope.metadata.failed_fetches == 0


@pytest.mark.asyncio
async def test_occasion_is_inferred_from_clock():
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES)).get_smart_dish()
    assert envelope.occasion is Occasion.dinner


@pytest.mark.asyncio
async def test_empty_primary_never_reports_success():
    envelope = await _orchestrator(InMemoryGateway([])).get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.fallback
    assert envelope.metadata.tier == "secondary"
    assert envelope.dish.dish.id.startswith("fallback-dinner-")
    assert envelope.dish.score == 5
    assert envelope.dish.score_category is ScoreCategory.average


@pytest.mark.asyncio
async def test_catalog_outage_falls_back():
    gateway = InMemoryGateway(DINNER_DISHES, failing_categories={
        "Chicken", "Seafood", "Vegetarian", "Pasta", "Side", "Starter", "Dessert", "Vegan",
    })
    envelope = await _orchestrator(gateway).get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.fallback
    assert envelope.metadata.failed_fetches == 8


@pytest.mark.asyncio
async def test_everything_filtered_returns_emergency_dish():
    blacklist = [SavedDish(id=d.id) for d in get_fallback_dishes(Occasion.dinner)]
    prefs = UserPreferences(blacklist=blacklist)
    envelope = await _orchestrator(InMemoryGateway([])).get_smart_dish(Occasion.dinner, prefs)

    assert envelope.status is ResultStatus.error
    assert envelope.metadata.tier == "tertiary"
    assert envelope.metadata.error
    assert envelope.dish.dish.id == "fallback-001"
    assert envelope.dish.score_category is ScoreCategory.minimal


@pytest.mark.asyncio
async def test_all_candidates_filtered_moves_to_secondary():
    prefs = UserPreferences(blacklist=[SavedDish(id=d.id) for d in DINNER_DISHES])
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES)).get_smart_dish(Occasion.dinner, prefs)

    assert envelope.status is ResultStatus.fallback
    assert envelope.metadata.dishes_after_hard_filter == 0


@pytest.mark.asyncio
async def test_partial_failures_shrink_the_pool():
    gateway = InMemoryGateway(DINNER_DISHES, failing_categories={"Seafood"}, failing_lookups={"101"})
    envelope = await _orchestrator(gateway).get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.success
    assert envelope.metadata.failed_fetches == 2
    assert envelope.metadata.total_dishes_found == 2
    assert envelope.dish.dish.id in {"103", "104"}


@pytest.mark.asyncio
async def test_slow_lookup_times_out():
    gateway = InMemoryGateway(DINNER_DISHES, hanging_lookups={"101", "102", "103"})
    orchestrator = _orchestrator(gateway, catalog_config=CatalogConfig(request_timeout=0.05))
    envelope = await orchestrator.get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.success
    assert envelope.dish.dish.id == "104"
    assert envelope.metadata.failed_fetches == 3


@pytest.mark.asyncio
async def test_soft_filter_is_reverted_when_it_would_empty():
    prefs = UserPreferences(preferred_complexity="complex")
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES)).get_smart_dish(Occasion.dinner, prefs)

    assert envelope.status is ResultStatus.success
    assert envelope.metadata.soft_filter_reverted
    assert envelope.metadata.dishes_after_soft_filter == envelope.metadata.dishes_after_scoring


@pytest.mark.asyncio
async def test_store_blacklist_and_history_are_respected():
    store = InMemoryPreferenceStore(clock=lambda: WEDNESDAY_EVENING)
    store.add_to_blacklist(DINNER_DISHES[0])
    store.add_to_history(DINNER_DISHES[1])
    store.add_to_history(DINNER_DISHES[2])
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES), store=store).get_smart_dish(Occasion.dinner)

    assert envelope.dish.dish.id == "104"


@pytest.mark.asyncio
async def test_recommendations_are_diverse():
    envelope = await _orchestrator(InMemoryGateway(DINNER_DISHES)).get_smart_recommendations(
        Occasion.dinner, UserPreferences(), count=3,
    )

    assert envelope.status is ResultStatus.success
    assert envelope.metadata.selection_method == "diverse"
    assert len(envelope.dishes) == 3
    assert len({c.dish.category for c in envelope.dishes}) == 3


@pytest.mark.asyncio
async def test_recommendations_fall_back_too():
    envelope = await _orchestrator(InMemoryGateway([])).get_smart_recommendations(
        Occasion.breakfast, UserPreferences(), count=3,
    )

    assert envelope.status is ResultStatus.fallback
    assert len(envelope.dishes) == 3
    assert all(c.dish.id.startswith("fallback-breakfast-") for c in envelope.dishes)


@pytest.mark.asyncio
async def test_cuisine_fan_out_uses_valid_cuisines_only():
    gateway = InMemoryGateway(DINNER_DISHES)
    prefs = UserPreferences(preferred_cuisines=["Italian", "Atlantean"])
    envelope = await _orchestrator(gateway).get_smart_dish(Occasion.dinner, prefs)

    assert gateway.cuisine_calls == ["Italian"]
    # Carbonara is listed under both Pasta and Italian but counted once.
    assert envelope.metadata.total_dishes_found == 4


@pytest.mark.asyncio
async def test_picked_dish_gets_calorie_estimate():
    estimate = CalorieEstimate(calories=520, category="moderate")
    orchestrator = _orchestrator(
        InMemoryGateway(DINNER_DISHES),
        calorie_estimator=lambda dish, occasion: estimate,
    )
    envelope = await orchestrator.get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.dish.analysis.calories == estimate


@pytest.mark.asyncio
async def test_failing_calorie_estimate_keeps_the_dish():
    def broken(dish, occasion):
        raise RuntimeError("quota exceeded")

    orchestrator = _orchestrator(InMemoryGateway(DINNER_DISHES), calorie_estimator=broken)
    envelope = await orchestrator.get_smart_dish(Occasion.dinner, UserPreferences())

    assert envelope.status is ResultStatus.success
    assert not envelope.dish.analysis.calories.determined


@pytest.mark.asyncio
async def test_records_analytics_event():
    await _orchestrator(InMemoryGateway([])).get_smart_dish(Occasion.lunch, UserPreferences())

    events = get_events("smart_dish")
    assert len(events) == 1
    assert events[0]["status"] == "fallback"
    assert events[0]["occasion"] == "lunch"
