"""Interaction learning, preference edits and the recently-viewed shelf.

Everything here is a pure transform: the caller owns the records and decides
where they are stored.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Optional

from trip_personalization.schemas import LearningData, RecentlyViewedItem, UserPreferences

InteractionAction = Literal["view", "wishlist", "book", "rate"]

RECENTLY_VIEWED_LIMIT = 10


def record_interaction(
    data: LearningData,
    trip_id: str,
    action: InteractionAction,
    value: Optional[float] = None,
) -> LearningData:
    """Return a copy of ``data`` with one more interaction folded in."""
    if action == "view":
        return data.model_copy(update={"viewed_trips": [*data.viewed_trips, trip_id]})
    if action == "wishlist":
        if trip_id in data.wishlisted:
            return data.model_copy(deep=True)
        return data.model_copy(update={"wishlisted": [*data.wishlisted, trip_id]})
    if action == "book":
        return data.model_copy(update={"booked_trips": [*data.booked_trips, trip_id]})
    if action == "rate":
        if value is None or isinstance(value, bool):
            raise ValueError("A rate interaction needs a numeric value")
        return data.model_copy(update={"rating_history": {**data.rating_history, trip_id: float(value)}})
    raise ValueError(f"Unsupported interaction action: {action!r}")


def record_search(data: LearningData, query: str) -> LearningData:
    """Append a trimmed search query; blank queries leave the history unchanged."""
    query = (query or "").strip()
    if not query:
        return data.model_copy(deep=True)
    return data.model_copy(update={"search_history": [*data.search_history, query]})


def update_preferences(prefs: UserPreferences, changes: Dict[str, Any]) -> UserPreferences:
    """Merge a partial update into ``prefs`` and re-validate the result.

    ``changes`` may use storefront (camelCase) or snake_case keys.
    """
    normalized = _snake_keys(changes)
    unknown = sorted(set(normalized) - set(UserPreferences.model_fields))
    if unknown:
        raise KeyError(f"Unknown preference fields: {', '.join(unknown)}")
    merged = {**prefs.model_dump(), **normalized}
    return UserPreferences.model_validate(merged)


def summarize_learning(data: LearningData) -> Dict[str, Any]:
    ratings = list(data.rating_history.values())
    return {
        "trips_booked": len(data.booked_trips),
        "wishlisted": len(data.wishlisted),
        "trips_viewed": len(data.viewed_trips),
        "unique_trips_viewed": len(set(data.viewed_trips)),
        "searches": len(data.search_history),
        "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else None,
    }


def add_recently_viewed(
    items: Iterable[RecentlyViewedItem],
    item: RecentlyViewedItem,
    now: datetime,
    limit: int = RECENTLY_VIEWED_LIMIT,
) -> List[RecentlyViewedItem]:
    """Put ``item`` at the front, stamped with ``now``, dropping any older copy."""
    stamped = item.model_copy(update={"viewed_at": now})
    remaining = [existing for existing in items if existing.id != item.id]
    return [stamped, *remaining][: max(0, limit)]


def remove_recently_viewed(items: Iterable[RecentlyViewedItem], item_id: str) -> List[RecentlyViewedItem]:
    return [item for item in items if item.id != item_id]


def _snake_keys(changes: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in changes.items():
        key = key[:1].lower() + key[1:]
        snake = "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in key)
        out[snake] = value
    return out
