from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .catalog.categories import CUISINES, POPULAR_CUISINES, get_categories_for_occasion
from .dependencies import close_gateway, get_orchestrator, get_store
from .preferences.store import InMemoryPreferenceStore
from .recommendations.context import get_current_occasion
from .recommendations.models import (
    DietaryRestriction,
    DishEnvelope,
    HistoryEntry,
    Occasion,
    ResultStatus,
    SaveDishRequest,
    SmartDishRequest,
    UserPreferences,
)
from .recommendations.retrieval import DishOrchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_gateway()


app = FastAPI(title="Smart Menu API", version="1.0.0", lifespan=lifespan)


def _record_history(envelope: DishEnvelope, store: InMemoryPreferenceStore) -> None:
    # The emergency dish is a placeholder, not something the user has seen.
    if envelope.status is ResultStatus.error:
        return
    for candidate in envelope.dishes:
        try:
            store.add_to_history(candidate.dish, envelope.occasion)
        except Exception:
            logger.warning("Could not record %s in history", candidate.dish.id, exc_info=True)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "occasions": [o.value for o in Occasion],
        "current_occasion": get_current_occasion().value,
        "categories": {o.value: get_categories_for_occasion(o, include_extended=True) for o in Occasion},
        "cuisines": sorted(CUISINES),
        "popular_cuisines": list(POPULAR_CUISINES),
        "dietary_restrictions": [r.value for r in DietaryRestriction],
        "complexity_levels": ["any", "simple", "medium", "complex"],
    }


# ── Dish selection ───────────────────────────────────────────────────────


@app.post("/smart-dish", response_model=DishEnvelope)
async def smart_dish(
    body: SmartDishRequest,
    orchestrator: DishOrchestrator = Depends(get_orchestrator),
    store: InMemoryPreferenceStore = Depends(get_store),
) -> DishEnvelope:
    envelope = await orchestrator.run(body.occasion, body.preferences, count=body.count)
    if body.record_history:
        _record_history(envelope, store)
    return envelope


@app.get("/smart-dish", response_model=DishEnvelope)
async def smart_dish_query(
    type: Occasion | None = Query(default=None, description="breakfast, lunch or dinner"),
    count: int = Query(default=1, ge=1, le=10),
    orchestrator: DishOrchestrator = Depends(get_orchestrator),
    store: InMemoryPreferenceStore = Depends(get_store),
) -> DishEnvelope:
    envelope = await orchestrator.run(type, store.get_preferences(), count=count)
    _record_history(envelope, store)
    return envelope


# ── Preferences ──────────────────────────────────────────────────────────


@app.get("/preferences", response_model=UserPreferences)
def read_preferences(store: InMemoryPreferenceStore = Depends(get_store)) -> UserPreferences:
    return store.get_preferences()


@app.put("/preferences", response_model=UserPreferences)
def write_preferences(
    body: UserPreferences,
    store: InMemoryPreferenceStore = Depends(get_store),
) -> UserPreferences:
    return store.save_preferences(body)


@app.get("/history", response_model=list[HistoryEntry])
def history(
    limit: int = Query(default=20, ge=1, le=50),
    store: InMemoryPreferenceStore = Depends(get_store),
) -> list[HistoryEntry]:
    return store.get_history(limit)


@app.delete("/history")
def clear_history(store: InMemoryPreferenceStore = Depends(get_store)) -> dict:
    store.clear_history()
    return {"status": "cleared"}


@app.post("/favorites")
def add_favorite(body: SaveDishRequest, store: InMemoryPreferenceStore = Depends(get_store)) -> dict:
    added = store.add_favorite(body.to_record(), body.reason)
    return {"status": "added" if added else "exists", "total": len(store.get_preferences().favorites)}


@app.delete("/favorites/{dish_id}")
def remove_favorite(dish_id: str, store: InMemoryPreferenceStore = Depends(get_store)) -> dict:
    if not store.remove_favorite(dish_id):
        raise HTTPException(status_code=404, detail="Dish is not a favorite")
    return {"status": "removed", "total": len(store.get_preferences().favorites)}


@app.post("/blacklist")
def add_to_blacklist(body: SaveDishRequest, store: InMemoryPreferenceStore = Depends(get_store)) -> dict:
    added = store.add_to_blacklist(body.to_record(), body.reason)
    return {"status": "added" if added else "exists", "total": len(store.get_preferences().blacklist)}


@app.delete("/blacklist/{dish_id}")
def remove_from_blacklist(dish_id: str, store: InMemoryPreferenceStore = Depends(get_store)) -> dict:
    if not store.remove_from_blacklist(dish_id):
        raise HTTPException(status_code=404, detail="Dish is not blacklisted")
    return {"status": "removed", "total": len(store.get_preferences().blacklist)}


# ── Analytics ────────────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
