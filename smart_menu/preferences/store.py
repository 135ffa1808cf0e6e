from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Protocol

from ..recommendations.models import (
    HISTORY_LIMIT,
    DishRecord,
    HistoryEntry,
    Occasion,
    SavedDish,
    UserPreferences,
)

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    def get_preferences(self) -> UserPreferences: ...

    def save_preferences(self, preferences: UserPreferences) -> UserPreferences: ...

    def add_to_history(self, dish: DishRecord, occasion: Occasion | None = None) -> None: ...

    def add_favorite(self, dish: DishRecord, reason: str | None = None) -> bool: ...

    def remove_favorite(self, dish_id: str) -> bool: ...

    def add_to_blacklist(self, dish: DishRecord, reason: str | None = None) -> bool: ...

    def remove_from_blacklist(self, dish_id: str) -> bool: ...

    def is_blacklisted(self, dish_id: str) -> bool: ...

    def shown_within(self, dish_id: str, days: int) -> bool: ...


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored by older callers; read them as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPreferenceStore:
    """
    Process-local preference store for a single user.

    Every mutation replaces the frozen snapshot, so a snapshot handed to the
    pipeline is never changed under it.
    """

    def __init__(
        self,
        preferences: UserPreferences | None = None,
        clock: Callable[[], datetime] = _utcnow,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self._preferences = preferences or UserPreferences()
        self._clock = clock
        self._history_limit = history_limit

    # ── Snapshot ─────────────────────────────────────────────────────────

    def get_preferences(self) -> UserPreferences:
        return self._preferences

    def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        self._preferences = preferences
        return self._preferences

    def update_preferences(self, **changes: Any) -> UserPreferences:
        """Validate *changes* against the model and store the merged snapshot."""
        merged = {**self._preferences.model_dump(), **changes}
        self._preferences = UserPreferences.model_validate(merged)
        return self._preferences

    def _replace(self, **changes: Any) -> None:
        self._preferences = self._preferences.model_copy(update=changes)

    # ── History ──────────────────────────────────────────────────────────

    def add_to_history(self, dish: DishRecord, occasion: Occasion | None = None) -> None:
        entry = HistoryEntry(
            id=dish.id,
            name=dish.name,
            category=dish.category,
            occasion=occasion,
            viewed_at=self._clock(),
        )
        rest = [h for h in self._preferences.history if h.id != dish.id]
        self._replace(history=[entry, *rest][: self._history_limit])

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        history = list(self._preferences.history)
        return history[:limit] if limit is not None else history

    def clear_history(self) -> None:
        self._replace(history=[])

    def shown_within(self, dish_id: str, days: int) -> bool:
        cutoff = _as_utc(self._clock()) - timedelta(days=days)
        return any(
            h.id == dish_id and _as_utc(h.viewed_at) > cutoff
            for h in self._preferences.history
        )

    # ── Favorites / blacklist ────────────────────────────────────────────

    def add_favorite(self, dish: DishRecord, reason: str | None = None) -> bool:
        if self.is_favorite(dish.id):
            return False
        saved = SavedDish(
            id=dish.id, name=dish.name, category=dish.category,
            added_at=self._clock(), reason=reason,
        )
        self._replace(favorites=[*self._preferences.favorites, saved])
        return True

    def remove_favorite(self, dish_id: str) -> bool:
        remaining = [f for f in self._preferences.favorites if f.id != dish_id]
        if len(remaining) == len(self._preferences.favorites):
            return False
        self._replace(favorites=remaining)
        return True

    def is_favorite(self, dish_id: str) -> bool:
        return dish_id in self._preferences.favorite_ids

    def add_to_blacklist(self, dish: DishRecord, reason: str | None = None) -> bool:
        if self.is_blacklisted(dish.id):
            return False
        saved = SavedDish(
            id=dish.id, name=dish.name, category=dish.category,
            added_at=self._clock(), reason=reason or "Not interested",
        )
        self._replace(blacklist=[*self._preferences.blacklist, saved])
        logger.info("Dish %s blacklisted", dish.id)
        return True

    def remove_from_blacklist(self, dish_id: str) -> bool:
        remaining = [b for b in self._preferences.blacklist if b.id != dish_id]
        if len(remaining) == len(self._preferences.blacklist):
            return False
        self._replace(blacklist=remaining)
        return True

    def is_blacklisted(self, dish_id: str) -> bool:
        return dish_id in self._preferences.blacklist_ids

    # ── Misc ─────────────────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        prefs = self._preferences
        return {
            "favorites": len(prefs.favorites),
            "blacklist": len(prefs.blacklist),
            "history": len(prefs.history),
            "dietary_restrictions": [r.value for r in prefs.dietary_restrictions],
            "preferred_cuisines": list(prefs.preferred_cuisines),
        }

    def clear(self) -> None:
        self._preferences = UserPreferences()
