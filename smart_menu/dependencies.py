from __future__ import annotations

from fastapi import Depends

from .catalog.gateway import MealDBGateway
from .preferences.store import InMemoryPreferenceStore
from .recommendations.retrieval import DishOrchestrator, default_calorie_estimator

_store = InMemoryPreferenceStore()
_gateway: MealDBGateway | None = None


def get_store() -> InMemoryPreferenceStore:
    """The process-wide preference store (single local user)."""
    return _store


def get_gateway() -> MealDBGateway:
    """Lazily create the shared TheMealDB client."""
    global _gateway
    if _gateway is None:
        _gateway = MealDBGateway()
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None


def get_orchestrator(
    gateway: MealDBGateway = Depends(get_gateway),
    store: InMemoryPreferenceStore = Depends(get_store),
) -> DishOrchestrator:
    return DishOrchestrator(
        gateway,
        store=store,
        calorie_estimator=default_calorie_estimator(),
    )
