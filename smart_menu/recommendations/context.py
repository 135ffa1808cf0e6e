from __future__ import annotations

from datetime import datetime
from types import MappingProxyType

from .models import Context, Occasion, TimeAvailable, Urgency

# Maximum acceptable cooking time (minutes) per amount of available time.
TIME_LIMITS = MappingProxyType({
    TimeAvailable.little: 25,
    TimeAvailable.medium: 45,
    TimeAvailable.much: 90,
})
HIGH_URGENCY_TIME_LIMIT = 30


def get_current_occasion(now: datetime | None = None) -> Occasion:
    hour = (now or datetime.now()).hour
    if 7 <= hour <= 11:
        return Occasion.breakfast
    if 12 <= hour <= 16:
        return Occasion.lunch
    return Occasion.dinner


def _time_available(hour: int, is_weekend: bool) -> TimeAvailable:
    if is_weekend:
        if 10 <= hour <= 16:
            return TimeAvailable.much
        if 8 <= hour <= 21:
            return TimeAvailable.medium
        return TimeAvailable.little

    if 7 <= hour <= 8 or 12 <= hour <= 13:
        return TimeAvailable.little
    if 18 <= hour <= 20:
        return TimeAvailable.medium
    if hour >= 21:
        return TimeAvailable.little
    return TimeAvailable.medium


def _urgency(hour: int) -> Urgency:
    if 7 <= hour <= 9 or 12 <= hour <= 14 or 18 <= hour <= 20:
        return Urgency.high
    if hour >= 22 or hour <= 6:
        return Urgency.low
    return Urgency.medium


def build_context(now: datetime | None = None) -> Context:
    """Snapshot the day-period flags for *now* (local wall-clock time)."""
    now = now or datetime.now()
    hour = now.hour
    is_weekend = now.weekday() >= 5

    return Context(
        hour=hour,
        is_weekend=is_weekend,
        is_early_morning=6 <= hour <= 8,
        is_morning=9 <= hour <= 11,
        is_afternoon=12 <= hour <= 17,
        is_evening=18 <= hour <= 21,
        is_late_evening=hour >= 22 or hour <= 5,
        time_available=_time_available(hour, is_weekend),
        urgency=_urgency(hour),
    )


def is_time_appropriate(cooking_time: int, context: Context) -> bool:
    """Whether a dish of *cooking_time* minutes fits the context. 0 (unknown) always fits."""
    if not cooking_time:
        return True
    if context.urgency is Urgency.high:
        return cooking_time <= HIGH_URGENCY_TIME_LIMIT
    return cooking_time <= TIME_LIMITS.get(context.time_available, TIME_LIMITS[TimeAvailable.medium])
