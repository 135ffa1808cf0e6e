"""
Dish orchestration.

A request walks an explicit, one-directional state machine:

    PRIMARY       fan out to the catalog, collect and deduplicate candidates
    FILTER_SCORE  hard filter, analyze, score, soft filter, select
    SECONDARY     curated fallback dishes for the occasion (hard filters only)
    TERTIARY      one hard-coded dish; cannot fail

An empty result at a tier moves to the next one. Every path returns a
``DishEnvelope`` whose status tells the caller which tier answered.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from ..analysis.analyzer import CalorieEstimator, analyze_dish
from ..analysis.calories import calculate_calories
from ..analytics.store import record_event
from ..catalog.categories import get_categories_with_restrictions, validate_cuisines
from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from ..catalog.fallback import EMERGENCY_DISH, get_fallback_dishes
from ..catalog.gateway import CatalogGateway
from ..llm.groq_client import estimate_calories
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .context import build_context, get_current_occasion
from .filters import filter_hard, filter_soft
from .models import (
    Context,
    DishEnvelope,
    DishRecord,
    Occasion,
    PipelineMetadata,
    ResultStatus,
    ScoredCandidate,
    UserPreferences,
)
from .scoring import filter_viable, score_candidates
from .scoring_rules import get_score_category
from .selection import SelectionEngine

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    primary = "primary"
    filter_score = "filter_score"
    secondary = "secondary"
    tertiary = "tertiary"


@dataclass
class _RunStats:
    total_dishes_found: int = 0
    failed_fetches: int = 0
    dishes_after_hard_filter: int = 0
    dishes_scored: int = 0
    dishes_after_scoring: int = 0
    dishes_after_soft_filter: int = 0
    soft_filter_reverted: bool = False


def default_calorie_estimator(config: PipelineConfig = DEFAULT_PIPELINE_CONFIG) -> CalorieEstimator:
    """Groq with offline fallback, or the offline calculator alone when LLM calls are turned off."""
    return estimate_calories if config.estimate_calories else calculate_calories


def _local_now() -> datetime:
    return datetime.now().astimezone()


class DishOrchestrator:
    """Composes catalog, filters, scoring and selection into "get one/N dishes"."""

    def __init__(
        self,
        gateway: CatalogGateway,
        store=None,
        calorie_estimator: CalorieEstimator | None = None,
        rng: random.Random | None = None,
        config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
        catalog_config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.calorie_estimator = calorie_estimator
        self.selector = SelectionEngine(rng)
        self.config = config
        self.catalog_config = catalog_config
        self.clock = clock

    # ── Public API ───────────────────────────────────────────────────────

    async def get_smart_dish(
        self,
        occasion: Occasion | None = None,
        preferences: UserPreferences | None = None,
    ) -> DishEnvelope:
        return await self.run(occasion, preferences, count=1)

    async def get_smart_recommendations(
        self,
        occasion: Occasion | None = None,
        preferences: UserPreferences | None = None,
        count: int = 3,
    ) -> DishEnvelope:
        return await self.run(occasion, preferences, count=max(count, 1))

    async def run(
        self,
        occasion: Occasion | None,
        preferences: UserPreferences | None,
        count: int = 1,
    ) -> DishEnvelope:
        start = time.perf_counter()
        now = self.clock()
        occasion = occasion or get_current_occasion(now)
        prefs = preferences if preferences is not None else self._stored_preferences()
        context = build_context(now)
        stats = _RunStats()

        pool: list[DishRecord] = []
        picks: list[ScoredCandidate] = []
        state = Tier.primary
        while True:
            if state is Tier.primary:
                pool = await self._fetch_candidates(occasion, prefs, stats)
                state = Tier.filter_score if pool else Tier.secondary
            elif state is Tier.filter_score:
                picks = await self._filter_and_score(pool, occasion, prefs, context, now, count, stats)
                if picks:
                    break
                state = Tier.secondary
            elif state is Tier.secondary:
                picks = self._secondary(occasion, prefs, now, count)
                if picks:
                    break
                state = Tier.tertiary
            else:
                picks = [self._tertiary(occasion)]
                break

        picks = await self._annotate_calories(picks, occasion)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 1)

        status = {
            Tier.filter_score: ResultStatus.success,
            Tier.secondary: ResultStatus.fallback,
            Tier.tertiary: ResultStatus.error,
        }[state]
        envelope = DishEnvelope(
            status=status,
            occasion=occasion,
            dishes=picks,
            context=context,
            metadata=PipelineMetadata(
                tier=Tier.primary.value if state is Tier.filter_score else state.value,
                selection_method="weighted_random" if count == 1 else "diverse",
                response_time_ms=elapsed_ms,
                timestamp=now,
                error="No dishes available" if status is ResultStatus.error else None,
                **asdict(stats),
            ),
        )

        logger.info(
            "Smart dish %s: status=%s found=%d hard=%d viable=%d picked=%d in %.1fms",
            occasion.value, status.value, stats.total_dishes_found,
            stats.dishes_after_hard_filter, stats.dishes_after_scoring,
            len(picks), elapsed_ms,
        )
        record_event("smart_dish", {
            "occasion": occasion.value,
            "status": status.value,
            "tier": envelope.metadata.tier,
            "count_requested": count,
            "total_dishes_found": stats.total_dishes_found,
            "failed_fetches": stats.failed_fetches,
            "categories": [p.dish.category for p in picks],
            "response_time_ms": elapsed_ms,
        })
        return envelope

    # ── Helpers ──────────────────────────────────────────────────────────

    def _stored_preferences(self) -> UserPreferences:
        if self.store is None:
            return UserPreferences()
        try:
            return self.store.get_preferences()
        except Exception:
            logger.warning("Could not read stored preferences, using defaults", exc_info=True)
            return UserPreferences()

    async def _guarded(self, make_call: Callable[[], Awaitable[Any]], label: str) -> tuple[bool, Any]:
        """Run one sub-fetch under the catalog timeout. Returns ``(ok, value)``; never raises."""
        try:
            value = await asyncio.wait_for(make_call(), timeout=self.catalog_config.request_timeout)
        except asyncio.TimeoutError:
            logger.warning("Catalog sub-fetch %s timed out", label)
            return False, None
        except Exception:
            logger.warning("Catalog sub-fetch %s failed", label, exc_info=True)
            return False, None
        return True, value

    # ── PRIMARY ──────────────────────────────────────────────────────────

    async def _fetch_candidates(
        self,
        occasion: Occasion,
        prefs: UserPreferences,
        stats: _RunStats,
    ) -> list[DishRecord]:
        categories = get_categories_with_restrictions(occasion, prefs.dietary_restrictions)
        cuisines = validate_cuisines(prefs.preferred_cuisines)

        listings = await asyncio.gather(
            *(self._guarded(lambda c=c: self.gateway.list_by_category(c), f"category={c}") for c in categories),
            *(self._guarded(lambda c=c: self.gateway.list_by_cuisine(c), f"cuisine={c}") for c in cuisines),
        )

        ids: list[str] = []
        seen: set[str] = set()
        for ok, stubs in listings:
            if not ok:
                stats.failed_fetches += 1
                continue
            for stub in stubs or []:
                if stub.id not in seen:
                    seen.add(stub.id)
                    ids.append(stub.id)

        if not ids:
            logger.info("Catalog returned no candidates for %s", occasion.value)
            return []

        details = await asyncio.gather(
            *(self._guarded(lambda i=i: self.gateway.get_details(i), f"lookup={i}") for i in ids)
        )

        dishes: list[DishRecord] = []
        seen.clear()
        for ok, dish in details:
            if not ok:
                stats.failed_fetches += 1
                continue
            if dish is None or dish.id in seen:
                continue
            seen.add(dish.id)
            dishes.append(dish)

        stats.total_dishes_found = len(dishes)
        logger.info(
            "Fetched %d dishes for %s from %d categories and %d cuisines (%d failed sub-fetches)",
            len(dishes), occasion.value, len(categories), len(cuisines), stats.failed_fetches,
        )
        return dishes

    # ── FILTER_SCORE ─────────────────────────────────────────────────────

    async def _filter_and_score(
        self,
        pool: list[DishRecord],
        occasion: Occasion,
        prefs: UserPreferences,
        context: Context,
        now: datetime,
        count: int,
        stats: _RunStats,
    ) -> list[ScoredCandidate]:
        filtered = filter_hard(pool, prefs, store=self.store, now=now, config=self.config)
        stats.dishes_after_hard_filter = len(filtered)
        if not filtered:
            return []

        scored = await score_candidates(filtered, occasion, prefs, context, now=now, config=self.config)
        stats.dishes_scored = len(scored)

        viable = filter_viable(scored, config=self.config)
        stats.dishes_after_scoring = len(viable)
        if not viable:
            return []

        narrowed = filter_soft(viable, prefs)
        if not narrowed:
            narrowed = viable
            stats.soft_filter_reverted = True
        stats.dishes_after_soft_filter = len(narrowed)

        return self._select(narrowed, count)

    def _select(self, candidates: list[ScoredCandidate], count: int) -> list[ScoredCandidate]:
        if count == 1:
            one = self.selector.select_one(candidates)
            return [one] if one is not None else []
        return self.selector.select_diverse(candidates, count)

    # ── SECONDARY / TERTIARY ─────────────────────────────────────────────

    def _fixed_score(self, dish: DishRecord, occasion: Occasion, score: float) -> ScoredCandidate:
        try:
            analysis = analyze_dish(dish, occasion)
        except Exception:
            logger.warning("Could not analyze fallback dish %s", dish.id, exc_info=True)
            analysis = None
        return ScoredCandidate(
            dish=dish,
            analysis=analysis,
            score=score,
            score_category=get_score_category(score),
        )

    def _secondary(
        self,
        occasion: Occasion,
        prefs: UserPreferences,
        now: datetime,
        count: int,
    ) -> list[ScoredCandidate]:
        dishes = filter_hard(get_fallback_dishes(occasion), prefs, store=self.store, now=now, config=self.config)
        if not dishes:
            logger.warning("No curated fallback dish passes the filters for %s", occasion.value)
            return []
        logger.info("Serving curated fallback for %s (%d dishes available)", occasion.value, len(dishes))
        scored = [self._fixed_score(d, occasion, self.config.fallback_score) for d in dishes]
        return self._select(scored, count)

    def _tertiary(self, occasion: Occasion) -> ScoredCandidate:
        logger.error("All tiers exhausted for %s, serving the emergency dish", occasion.value)
        return self._fixed_score(EMERGENCY_DISH, occasion, self.config.emergency_score)

    # ── Calorie annotation ───────────────────────────────────────────────

    async def _annotate_calories(
        self,
        picks: list[ScoredCandidate],
        occasion: Occasion,
    ) -> list[ScoredCandidate]:
        """Attach calorie estimates to the chosen dishes only; failures leave them undetermined."""
        estimator = self.calorie_estimator
        if estimator is None:
            return picks

        async def annotate(candidate: ScoredCandidate) -> ScoredCandidate:
            if candidate.analysis is None:
                return candidate
            try:
                estimate = await asyncio.wait_for(
                    asyncio.to_thread(estimator, candidate.dish, occasion),
                    timeout=self.catalog_config.request_timeout,
                )
            except Exception:
                logger.warning("Calorie estimate failed for dish %s", candidate.dish.id, exc_info=True)
                return candidate
            analysis = candidate.analysis.model_copy(update={"calories": estimate})
            return candidate.model_copy(update={"analysis": analysis})

        return list(await asyncio.gather(*(annotate(c) for c in picks)))
