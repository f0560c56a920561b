# trip_personalization/orchestrator.py
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel

from trip_personalization.config import EngineConfig, load_config
from trip_personalization.engines.offer_generator import generate_offers
from trip_personalization.engines.ranker import rank_trips
from trip_personalization.schemas import (
    PersonalizationResponse,
    TargetedOffer,
    TripCandidate,
    UserBehaviorData,
    UserPreferences,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PERSONALIZATION_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

_M = TypeVar("_M", bound=BaseModel)


def personalize(
    prefs: UserPreferences | Dict[str, Any],
    trips: Iterable[TripCandidate | Dict[str, Any]],
    behavior: UserBehaviorData | Dict[str, Any] | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> PersonalizationResponse:
    """Rank ``trips`` for ``prefs`` and derive offers from ``behavior``.

    Inputs may be models or raw storefront payloads. ``now`` defaults to the
    current UTC time; the engines themselves never read the clock, so tests
    pass an explicit value. Without ``behavior`` no offers are produced.
    """
    config = config or load_config()
    generated_at = now or datetime.now(timezone.utc)

    prefs_model = _coerce(UserPreferences, prefs)
    trip_models = [_coerce(TripCandidate, trip) for trip in trips]

    logger.info(
        "Personalizing %d trips for style=%s budget=%s duration=%s",
        len(trip_models),
        prefs_model.travel_style,
        prefs_model.budget_range,
        prefs_model.duration,
    )

    recommendations = rank_trips(trip_models, prefs_model, config)

    offers: List[TargetedOffer] = []
    if behavior is not None:
        offers = generate_offers(_coerce(UserBehaviorData, behavior), generated_at, config)
    else:
        logger.debug("No behavior record supplied; skipping offer generation")

    logger.info(
        "Ranked %d trips (%d recommended, best %.2f); generated %d offers",
        len(recommendations),
        sum(1 for trip in recommendations if trip.is_recommended),
        recommendations[0].match_score if recommendations else 0.0,
        len(offers),
    )
    return PersonalizationResponse(
        generated_at=generated_at,
        recommendations=recommendations,
        offers=offers,
    )


def _coerce(model: Type[_M], payload: Any) -> _M:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, dict):
        return model.model_validate(payload)
    if hasattr(payload, "model_dump"):
        return model.model_validate(payload.model_dump(mode="python"))
    raise TypeError(f"Unsupported payload type for {model.__name__}: {type(payload).__name__}")
