from __future__ import annotations

import json
import logging

from groq import Groq

from ..analysis.calories import calculate_calories, calorie_category
from ..errors import AnnotationError
from ..recommendations.models import CalorieEstimate, DishRecord, Occasion
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a nutrition assistant. "
    "Given a dish with its ingredients, quantities and cooking instructions, "
    "estimate the calories of ONE serving as it would be eaten for the given meal.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"calories": <integer>, "category": "<low|moderate|high>"}\n'
    "Use low for under 400 kcal, moderate for 400-700 kcal and high above 700 kcal."
)

_CATEGORIES = {"low", "moderate", "high"}


def _build_user_message(dish: DishRecord, occasion: Occasion | str, max_chars: int = 1500) -> str:
    occasion_label = occasion.value if isinstance(occasion, Occasion) else str(occasion)
    lines = [f"## Dish: {dish.name or 'Unknown dish'}"]
    if dish.category:
        lines.append(f"- Category: {dish.category}")
    if dish.area:
        lines.append(f"- Cuisine: {dish.area}")
    lines.append(f"- Meal: {occasion_label}")

    lines.append("\n## Ingredients")
    lines.append("| Ingredient | Quantity |")
    lines.append("|---|---|")
    for ing in dish.ingredients:
        lines.append(f"| {ing.name} | {ing.measure or '?'} |")

    if dish.instructions:
        lines.append("\n## Instructions")
        lines.append(dish.instructions[:max_chars])

    return "\n".join(lines)


def _parse_estimate(content: str) -> CalorieEstimate:
    try:
        parsed = json.loads(content)
        calories = int(round(float(parsed["calories"])))
    except (ValueError, TypeError, KeyError) as exc:
        raise AnnotationError(f"Unusable calorie payload: {content[:200]!r}") from exc
    if calories < 0:
        raise AnnotationError(f"Negative calorie estimate: {calories}")

    label = str(parsed.get("category", "")).strip().lower()
    if label not in _CATEGORIES:
        label = calorie_category(calories)
    return CalorieEstimate(calories=calories, category=label)


def _offline_estimate(dish: DishRecord, occasion: Occasion | str, config: LLMConfig) -> CalorieEstimate:
    if not config.offline_fallback:
        return CalorieEstimate.undetermined()
    return calculate_calories(dish, occasion)


def estimate_calories(
    dish: DishRecord,
    occasion: Occasion | str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> CalorieEstimate:
    """
    Ask Groq for a per-serving calorie estimate of *dish*.

    When Groq is disabled, has no key, or fails (timeout, API error, bad
    JSON), the offline ingredient-table calculator answers instead, or the
    estimate stays undetermined if ``config.offline_fallback`` is off.
    Never raises.
    """
    if not config.enabled or not config.api_key:
        return _offline_estimate(dish, occasion, config)

    if not dish.ingredients and not dish.instructions:
        return _offline_estimate(dish, occasion, config)

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(dish, occasion, config.max_instruction_chars)},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        return _parse_estimate(content)

    except Exception:
        logger.warning(
            "Groq calorie estimate failed for dish %s, using the offline estimate",
            dish.id,
            exc_info=True,
        )
        return _offline_estimate(dish, occasion, config)
