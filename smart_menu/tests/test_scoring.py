from unittest.mock import patch

import pytest

from smart_menu.recommendations.context import build_context
from smart_menu.recommendations.models import (
    DishAnalysis,
    HistoryEntry,
    NutritionAnalysis,
    Occasion,
    SavedDish,
    ScoreCategory,
    ScoredCandidate,
    UserPreferences,
)
from smart_menu.recommendations.scoring import (
    calculate_base_score,
    calculate_bonuses,
    calculate_context_modifiers,
    calculate_penalties,
    filter_viable,
    score_candidate,
    score_candidates,
    score_dish,
)
from smart_menu.recommendations.scoring_rules import get_score_category

from conftest import WEDNESDAY_EVENING, make_dish

QUICK_SIMPLE = DishAnalysis(cooking_time=15, complexity=3, time_category="quick", complexity_category="simple")
CONTEXT = build_context(WEDNESDAY_EVENING)


class TestBaseScore:
    def test_occasion_tables_differ(self):
        dish = make_dish(category="Dessert")
        breakfast = calculate_base_score(dish, QUICK_SIMPLE, Occasion.breakfast)
        dinner = calculate_base_score(dish, QUICK_SIMPLE, Occasion.dinner)
        assert breakfast != dinner
        assert breakfast == 12
        assert dinner == 10

    def test_unknown_cooking_time(self):
        analysis = DishAnalysis(cooking_time=0, complexity_category="simple")
        assert calculate_base_score(make_dish(category=""), analysis, Occasion.dinner) == 7

    def test_nutrition_weights_add_up(self):
        analysis = QUICK_SIMPLE.model_copy(update={
            "nutrition": NutritionAnalysis(is_balanced=True, is_hearty=True),
        })
        # lunch: quick 3 + simple 2 + balanced 5 + hearty 4
        assert calculate_base_score(make_dish(category=""), analysis, Occasion.lunch) == 14


class TestModifiers:
    def test_early_weekday_morning_rewards_quick_simple_familiar(self):
        context = build_context(WEDNESDAY_EVENING.replace(hour=7))
        assert context.is_early_morning and context.is_weekday
        # early morning 2+1, weekday 1+1+1, high urgency 3+2+1
        assert calculate_context_modifiers(make_dish(), QUICK_SIMPLE, context) == 12

    def test_long_complex_dish_gets_nothing_on_busy_weekday(self):
        analysis = DishAnalysis(cooking_time=120, complexity=14, time_category="long", complexity_category="complex")
        dish = make_dish(area="Moroccan")
        assert calculate_context_modifiers(dish, analysis, CONTEXT) == 0


class TestBonuses:
    def test_favorite(self):
        dish = make_dish(category="")
        plain = calculate_bonuses(dish, QUICK_SIMPLE, Occasion.dinner, UserPreferences())
        loved = calculate_bonuses(
            dish, QUICK_SIMPLE, Occasion.dinner,
            UserPreferences(favorites=[SavedDish(id=dish.id)]),
        )
        assert loved - plain == 10

    def test_preferred_popular_cuisine(self):
        dish = make_dish(category="", area="Italian")
        prefs = UserPreferences(preferred_cuisines=["Italian"])
        assert calculate_bonuses(dish, QUICK_SIMPLE, Occasion.dinner, prefs) == 3.5

    def test_high_priority_category(self):
        dish = make_dish(category="Seafood")
        assert calculate_bonuses(dish, QUICK_SIMPLE, Occasion.dinner, UserPreferences()) == 3

    def test_dietary_match(self):
        analysis = QUICK_SIMPLE.model_copy(update={"is_vegetarian": True})
        prefs = UserPreferences(dietary_restrictions=["vegetarian"])
        assert calculate_bonuses(make_dish(category=""), analysis, Occasion.dinner, prefs) == 2

    def test_variety(self):
        prefs = UserPreferences(history=[HistoryEntry(id="x", category="Beef")])
        assert calculate_bonuses(make_dish(category="Goat"), QUICK_SIMPLE, Occasion.dinner, prefs) == 1
        assert calculate_bonuses(make_dish(category="Beef"), QUICK_SIMPLE, Occasion.dinner, prefs) == 0


class TestPenalties:
    def test_cumulative_time_and_complexity(self):
        analysis = DishAnalysis(cooking_time=150, complexity=19, time_category="long", complexity_category="complex")
        penalty = calculate_penalties(make_dish(), analysis, UserPreferences(), CONTEXT, now=WEDNESDAY_EVENING)
        # -3 -5 -2 -4, plus -2 for exceeding the high-urgency limit
        assert penalty == -16

    def test_blacklisted_and_disliked(self):
        dish = make_dish(ingredients=("Chicken", "Olives"))
        prefs = UserPreferences(disliked_ingredients=["olives"], blacklist=[SavedDish(id=dish.id)])
        penalty = calculate_penalties(dish, QUICK_SIMPLE, prefs, CONTEXT, now=WEDNESDAY_EVENING)
        assert penalty == -110


class TestScore:
    def test_never_negative(self):
        dish = make_dish(ingredients=("Olives",))
        analysis = DishAnalysis(cooking_time=700, complexity=20, time_category="long", complexity_category="complex")
        prefs = UserPreferences(disliked_ingredients=["olives"], blacklist=[SavedDish(id=dish.id)])
        assert score_dish(dish, analysis, Occasion.lunch, prefs, CONTEXT, now=WEDNESDAY_EVENING) == 0

    def test_score_candidate_end_to_end(self):
        candidate = score_candidate(make_dish(), Occasion.dinner, UserPreferences(), CONTEXT, now=WEDNESDAY_EVENING)
        assert candidate.analysis is not None
        assert candidate.score >= 0
        assert candidate.score_category is get_score_category(candidate.score)

    def test_analysis_failure_yields_minimal_candidate(self):
        with patch("smart_menu.recommendations.scoring.analyze_dish", side_effect=RuntimeError("bad record")):
            candidate = score_candidate(make_dish(), Occasion.dinner, UserPreferences(), CONTEXT)
        assert candidate.score == 0
        assert candidate.score_category is ScoreCategory.minimal
        assert candidate.analysis is None


@pytest.mark.asyncio
async def test_score_candidates_isolates_failures():
    from smart_menu.analysis.analyzer import analyze_dish as real_analyze

    def flaky(dish, occasion, calorie_estimator=None):
        if dish.id == "bad":
            raise RuntimeError("bad record")
        return real_analyze(dish, occasion, calorie_estimator=calorie_estimator)

    dishes = [make_dish("a"), make_dish("bad"), make_dish("c")]
    with patch("smart_menu.recommendations.scoring.analyze_dish", side_effect=flaky):
        scored = await score_candidates(dishes, Occasion.dinner, UserPreferences(), CONTEXT, now=WEDNESDAY_EVENING)

    assert [c.dish.id for c in scored] == ["a", "bad", "c"]
    assert scored[1].score == 0
    assert scored[0].score > 0 and scored[2].score > 0
    assert [c.dish.id for c in filter_viable(scored)] == ["a", "c"]


@pytest.mark.parametrize("score, expected", [
    (15, ScoreCategory.excellent),
    (14.9, ScoreCategory.good),
    (10, ScoreCategory.good),
    (5, ScoreCategory.average),
    (2, ScoreCategory.poor),
    (1.9, ScoreCategory.minimal),
    (0, ScoreCategory.minimal),
])
def test_score_category_thresholds(score, expected):
    assert get_score_category(score) is expected


def test_filter_viable_uses_minimum_score():
    low = ScoredCandidate(dish=make_dish("1"), score=0.5, score_category=ScoreCategory.minimal)
    ok = ScoredCandidate(dish=make_dish("2"), score=1, score_category=ScoreCategory.minimal)
    assert filter_viable([low, ok]) == [ok]
