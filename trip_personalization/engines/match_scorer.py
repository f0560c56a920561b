"""Weighted-factor match scoring between one trip and one preference profile."""
from __future__ import annotations

import logging
import math
import os
from typing import Dict, Iterable, List, Optional, Tuple

from trip_personalization.config import DEFAULT_CONFIG, EngineConfig
from trip_personalization.schemas import TripCandidate, UserPreferences

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PERSONALIZATION_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

_MAX_RATING = 5.0


def score_trip(
    trip: TripCandidate,
    prefs: UserPreferences,
    config: EngineConfig | None = None,
) -> Tuple[float, List[str]]:
    """Return ``(match_score, reasons)`` for ``trip`` against ``prefs``.

    Each factor contributes its full weight when satisfied and nothing
    otherwise; the sum is normalised by the total weight so the score stays in
    [0, 1] whatever the configured weights. Malformed values (inverted ranges,
    negative prices, NaN) never raise, they just fail their factor.
    """
    config = config or DEFAULT_CONFIG
    factors = evaluate_factors(trip, prefs)
    weights = config.weights

    satisfied = (
        (weights.budget if factors["budget"] else 0.0)
        + (weights.style if factors["style"] else 0.0)
        + (weights.duration if factors["duration"] else 0.0)
        + (weights.interests if factors["interests"] else 0.0)
        + (weights.destination if factors["destination"] else 0.0)
    )
    total = weights.total()
    match_score = _clamp(satisfied / total) if total > 0 else 0.0
    match_score = round(match_score, 4)

    reasons = personalization_reasons(trip, prefs, config=config, factors=factors)
    logger.debug(
        "Trip %s scored %.4f (factors=%s)",
        trip.id,
        match_score,
        ",".join(name for name, hit in factors.items() if hit) or "none",
    )
    return match_score, reasons


def evaluate_factors(trip: TripCandidate, prefs: UserPreferences) -> Dict[str, bool]:
    """Evaluate every scoring factor independently."""
    return {
        "budget": _budget_fits(trip.price, prefs.budget_range),
        "style": bool(trip.category) and trip.category == prefs.travel_style,
        "duration": _duration_fits(trip.duration_days, prefs.duration),
        "interests": _first_interest_highlight(trip.highlights, prefs.interests) is not None,
        "destination": _destination_matches(trip.location, prefs.preferred_destinations),
    }


def personalization_reasons(
    trip: TripCandidate,
    prefs: UserPreferences,
    *,
    config: EngineConfig | None = None,
    factors: Dict[str, bool] | None = None,
) -> List[str]:
    """Explain a match, most persuasive reason first.

    Candidates are checked in a fixed priority order (budget, style, duration,
    rating, sale, interest) and only the first ``max_reasons`` are kept.
    """
    config = config or DEFAULT_CONFIG
    factors = factors if factors is not None else evaluate_factors(trip, prefs)
    rules = config.recommendation

    reasons: List[str] = []
    if factors["budget"]:
        reasons.append("Fits your budget perfectly")
    if factors["style"]:
        reasons.append(f"Perfect for {prefs.travel_style} lovers")
    if factors["duration"]:
        reasons.append("Ideal duration for your schedule")
    if _is_finite(trip.rating) and rules.high_rating_threshold <= trip.rating <= _MAX_RATING:
        reasons.append("Highly rated by travelers like you")
    if trip.is_on_sale:
        reasons.append("Special offer just for you")
    highlight = _first_interest_highlight(trip.highlights, prefs.interests)
    if highlight is not None:
        reasons.append(f"Includes {highlight} which you love")

    return reasons[: rules.max_reasons]


def _budget_fits(price: float, budget_range: Tuple[float, float]) -> bool:
    low, high = budget_range
    if not all(_is_finite(v) for v in (price, low, high)):
        return False
    if price < 0 or low < 0 or low > high:
        return False
    return low <= price <= high


def _duration_fits(days: int, duration: Tuple[int, int]) -> bool:
    low, high = duration
    if days < 1 or low < 1 or low > high:
        return False
    return low <= days <= high


def _first_interest_highlight(highlights: Iterable[str], interests: Iterable[str]) -> Optional[str]:
    needles = _normalized_terms(interests)
    if not needles:
        return None
    for highlight in highlights:
        lowered = highlight.lower()
        if any(needle in lowered for needle in needles):
            return highlight
    return None


def _destination_matches(location: str, destinations: Iterable[str]) -> bool:
    lowered = (location or "").lower()
    if not lowered:
        return False
    return any(dest in lowered for dest in _normalized_terms(destinations))


def _normalized_terms(values: Iterable[str]) -> List[str]:
    # A blank term is a substring of everything; drop it rather than match all.
    return [v.lower() for v in values if v and v.strip()]


def _is_finite(value: float) -> bool:
    return value is not None and math.isfinite(value)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
