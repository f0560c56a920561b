"""Recommendation ranking over a catalog of candidate trips."""
from __future__ import annotations

import logging
import os
from typing import Iterable, List

from trip_personalization.config import DEFAULT_CONFIG, EngineConfig
from trip_personalization.engines.match_scorer import score_trip
from trip_personalization.schemas import PersonalizedTrip, TripCandidate, UserPreferences

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PERSONALIZATION_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


def rank_trips(
    trips: Iterable[TripCandidate],
    prefs: UserPreferences,
    config: EngineConfig | None = None,
) -> List[PersonalizedTrip]:
    """Score every trip and return them best match first.

    The sort is stable: trips with equal scores keep their catalog order.
    """
    config = config or DEFAULT_CONFIG
    threshold = config.recommendation.recommended_threshold

    personalized: List[PersonalizedTrip] = []
    for trip in trips:
        match_score, reasons = score_trip(trip, prefs, config)
        personalized.append(
            PersonalizedTrip(
                **trip.model_dump(include=set(TripCandidate.model_fields)),
                match_score=match_score,
                personalized_reason=reasons,
                is_recommended=match_score > threshold,
            )
        )

    ranked = sorted(personalized, key=lambda t: t.match_score, reverse=True)
    logger.debug(
        "Ranked %d trips; %d above threshold %.2f",
        len(ranked),
        sum(1 for t in ranked if t.is_recommended),
        threshold,
    )
    return ranked


def top_recommendations(
    trips: Iterable[TripCandidate],
    prefs: UserPreferences,
    limit: int = 3,
    config: EngineConfig | None = None,
) -> List[PersonalizedTrip]:
    """Return at most ``limit`` trips flagged as recommended, best first."""
    if limit <= 0:
        return []
    recommended = [t for t in rank_trips(trips, prefs, config) if t.is_recommended]
    return recommended[:limit]
