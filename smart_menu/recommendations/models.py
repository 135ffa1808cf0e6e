from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_INGREDIENT_SLOTS = 20
HISTORY_LIMIT = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Enumerations ─────────────────────────────────────────────────────────


class Occasion(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"


class DietaryRestriction(str, Enum):
    vegetarian = "vegetarian"
    vegan = "vegan"
    pescatarian = "pescatarian"
    gluten_free = "gluten-free"
    dairy_free = "dairy-free"
    nut_free = "nut-free"
    low_carb = "lowCarb"
    high_protein = "highProtein"


class NutritionProfile(str, Enum):
    balanced = "balanced"
    high_carb = "highCarb"
    high_protein = "highProtein"
    low_calorie = "lowCalorie"
    high_fat = "highFat"


class CookingMethodCategory(str, Enum):
    healthy = "healthy"
    quick = "quick"
    slow = "slow"
    unknown = "unknown"


class ScoreCategory(str, Enum):
    excellent = "excellent"
    good = "good"
    average = "average"
    poor = "poor"
    minimal = "minimal"


class TimeAvailable(str, Enum):
    much = "much"
    medium = "medium"
    little = "little"


class Urgency(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class ResultStatus(str, Enum):
    success = "success"
    fallback = "fallback"
    error = "error"


# ── Catalog records ──────────────────────────────────────────────────────


class Ingredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    measure: str = ""


class DishStub(BaseModel):
    """Listing entry returned by category/cuisine lookups (no instructions)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    thumbnail: str = ""


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def extract_ingredients(payload: dict[str, Any]) -> tuple[Ingredient, ...]:
    """Collect the sparse ``strIngredientN`` / ``strMeasureN`` slots into one ordered sequence."""
    ingredients: list[Ingredient] = []
    for i in range(1, MAX_INGREDIENT_SLOTS + 1):
        name = _clean(payload.get(f"strIngredient{i}"))
        if not name:
            continue
        ingredients.append(Ingredient(name=name, measure=_clean(payload.get(f"strMeasure{i}"))))
    return tuple(ingredients)


class DishRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    area: str = ""
    ingredients: tuple[Ingredient, ...] = Field(default=(), max_length=MAX_INGREDIENT_SLOTS)
    instructions: str = ""
    thumbnail: str = ""

    @classmethod
    def from_mealdb(cls, payload: dict[str, Any]) -> DishRecord:
        """Build a record from a raw TheMealDB ``meals[]`` item; blanks become empty strings."""
        return cls(
            id=_clean(payload.get("idMeal")),
            name=_clean(payload.get("strMeal")),
            category=_clean(payload.get("strCategory")),
            area=_clean(payload.get("strArea")),
            ingredients=extract_ingredients(payload),
            instructions=_clean(payload.get("strInstructions")),
            thumbnail=_clean(payload.get("strMealThumb")),
        )

    def ingredient_names(self) -> list[str]:
        return [ing.name for ing in self.ingredients]

    def ingredients_text(self, include_name: bool = False) -> str:
        """Lower-cased, space-joined ingredient names (optionally followed by the dish name)."""
        parts = self.ingredient_names()
        if include_name and self.name:
            parts.append(self.name)
        return " ".join(parts).lower()


# ── Derived analysis ─────────────────────────────────────────────────────


class CalorieEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: int | None = None
    category: str = "undetermined"

    @property
    def determined(self) -> bool:
        return self.calories is not None

    @classmethod
    def undetermined(cls) -> CalorieEstimate:
        return cls()


class NutritionAnalysis(BaseModel):
    carb_count: int = 0
    protein_count: int = 0
    vegetable_count: int = 0
    fat_count: int = 0
    profile: NutritionProfile = NutritionProfile.balanced
    is_balanced: bool = False
    is_light: bool = False
    is_hearty: bool = False
    is_sweet: bool = False


class DishAnalysis(BaseModel):
    cooking_time: int = Field(default=0, ge=0, le=720, description="Minutes, 0 = unknown")
    complexity: int = Field(default=0, ge=0, le=20)
    time_category: Literal["quick", "medium", "long"] = "medium"
    complexity_category: Literal["simple", "medium", "complex"] = "simple"

    proteins: list[str] = Field(default_factory=list)
    vegetable_count: int = 0
    ingredient_count: int = 0

    cooking_methods: list[str] = Field(default_factory=list)
    cooking_category: CookingMethodCategory = CookingMethodCategory.unknown
    is_healthy_cooking: bool = False
    is_quick_cooking: bool = False

    nutrition: NutritionAnalysis = Field(default_factory=NutritionAnalysis)
    calories: CalorieEstimate = Field(default_factory=CalorieEstimate)

    is_vegetarian: bool = False
    is_seafood: bool = False
    is_quick: bool = False
    is_complex: bool = False

    analysis_version: str = "1.1"
    analyzed_at: datetime = Field(default_factory=_utcnow)


# ── User preferences ─────────────────────────────────────────────────────


class SavedDish(BaseModel):
    """Favorite or blacklist entry."""

    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    added_at: datetime = Field(default_factory=_utcnow)
    reason: str | None = None


class HistoryEntry(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    occasion: Occasion | None = None
    viewed_at: datetime = Field(default_factory=_utcnow)


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    disliked_ingredients: list[str] = Field(default_factory=list)
    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    favorites: list[SavedDish] = Field(default_factory=list)
    blacklist: list[SavedDish] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(
        default_factory=list, description="Most recent first"
    )
    preferred_complexity: Literal["any", "simple", "medium", "complex"] = "any"
    preferred_cuisines: list[str] = Field(default_factory=list)
    max_cooking_time: int | None = Field(default=None, ge=0)

    @field_validator("disliked_ingredients")
    @classmethod
    def _normalise_disliked(cls, value: list[str]) -> list[str]:
        return [v.strip().lower() for v in value if v and v.strip()]

    @field_validator("history")
    @classmethod
    def _cap_history(cls, value: list[HistoryEntry]) -> list[HistoryEntry]:
        return value[:HISTORY_LIMIT]

    @property
    def favorite_ids(self) -> set[str]:
        return {f.id for f in self.favorites}

    @property
    def blacklist_ids(self) -> set[str]:
        return {b.id for b in self.blacklist}


# ── Context ──────────────────────────────────────────────────────────────


class Context(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int = Field(..., ge=0, le=23)
    is_weekend: bool
    is_early_morning: bool = False
    is_morning: bool = False
    is_afternoon: bool = False
    is_evening: bool = False
    is_late_evening: bool = False
    time_available: TimeAvailable = TimeAvailable.medium
    urgency: Urgency = Urgency.medium

    @property
    def is_weekday(self) -> bool:
        return not self.is_weekend


# ── Scoring output & envelope ────────────────────────────────────────────


class ScoredCandidate(BaseModel):
    dish: DishRecord
    analysis: DishAnalysis | None = None
    score: float = Field(..., ge=0.0)
    score_category: ScoreCategory


class PipelineMetadata(BaseModel):
    tier: str
    selection_method: str
    total_dishes_found: int = 0
    failed_fetches: int = 0
    dishes_after_hard_filter: int = 0
    dishes_scored: int = 0
    dishes_after_scoring: int = 0
    dishes_after_soft_filter: int = 0
    soft_filter_reverted: bool = False
    response_time_ms: float = 0.0
    timestamp: datetime = Field(default_factory=_utcnow)
    error: str | None = None


class DishEnvelope(BaseModel):
    status: ResultStatus
    occasion: Occasion
    dishes: list[ScoredCandidate]
    context: Context
    metadata: PipelineMetadata

    @property
    def dish(self) -> ScoredCandidate:
        return self.dishes[0]


# ── API bodies ───────────────────────────────────────────────────────────


class SmartDishRequest(BaseModel):
    occasion: Occasion | None = None
    preferences: UserPreferences | None = Field(
        default=None, description="Omit to use the stored preferences snapshot"
    )
    count: int = Field(default=1, ge=1, le=10)
    record_history: bool = True


class SaveDishRequest(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    reason: str | None = None

    def to_record(self) -> DishRecord:
        return DishRecord(id=self.id, name=self.name, category=self.category)
