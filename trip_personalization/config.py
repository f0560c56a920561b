"""Tunable weights, thresholds and offer windows for the personalization engine.

The values are product-tuned constants. They live here, named, so operators can
override them (``.env`` file or ``TRIP_PERSONALIZATION_*`` variables) without
touching the engines. Defaults reproduce the storefront's behaviour exactly.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PERSONALIZATION_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# Load .env file if present
load_dotenv()

_ENV_PREFIX = "TRIP_PERSONALIZATION_"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class MatchWeights(_Frozen):
    """Per-factor weights. Normalised by their sum, so they need not add to 1."""
    budget: float = Field(0.30, ge=0)
    style: float = Field(0.25, ge=0)
    duration: float = Field(0.20, ge=0)
    interests: float = Field(0.15, ge=0)
    destination: float = Field(0.10, ge=0)

    def total(self) -> float:
        return self.budget + self.style + self.duration + self.interests + self.destination


class RecommendationRules(_Frozen):
    recommended_threshold: float = Field(0.7, ge=0, le=1)  # strictly greater than
    high_rating_threshold: float = 4.5
    max_reasons: int = Field(2, ge=0)


class OfferRules(_Frozen):
    # Abandoned-cart recovery
    abandon_window_hours: float = Field(72, gt=0)
    abandon_discount_pct: float = 15
    abandon_valid_hours: float = Field(24, gt=0)

    # Loyalty reward
    loyalty_min_score: float = 50  # strictly greater than
    loyalty_valid_hours: float = Field(7 * 24, gt=0)

    # Category affinity
    category_discount_pct: float = 20
    category_valid_hours: float = Field(5 * 24, gt=0)
    fallback_category: str = "adventure"

    # Budget bundle
    bundle_midpoint_ceiling: float = 15000  # strictly less than
    bundle_value: float = 3000
    bundle_min_trips: int = 2
    bundle_min_price_per_trip: float = 8000
    bundle_valid_hours: float = Field(10 * 24, gt=0)

    # Last-minute
    last_minute_window_hours: float = Field(7 * 24, gt=0)
    last_minute_discount_pct: float = 25
    last_minute_valid_hours: float = Field(48, gt=0)
    last_minute_departure_days: int = 14


class EngineConfig(_Frozen):
    weights: MatchWeights = MatchWeights()
    recommendation: RecommendationRules = RecommendationRules()
    offers: OfferRules = OfferRules()


DEFAULT_CONFIG = EngineConfig()

# Environment variable suffix -> (section, field)
_ENV_FIELDS: Dict[str, tuple[str, str]] = {
    "WEIGHT_BUDGET": ("weights", "budget"),
    "WEIGHT_STYLE": ("weights", "style"),
    "WEIGHT_DURATION": ("weights", "duration"),
    "WEIGHT_INTERESTS": ("weights", "interests"),
    "WEIGHT_DESTINATION": ("weights", "destination"),
    "RECOMMENDED_THRESHOLD": ("recommendation", "recommended_threshold"),
    "HIGH_RATING_THRESHOLD": ("recommendation", "high_rating_threshold"),
    "MAX_REASONS": ("recommendation", "max_reasons"),
    "ABANDON_WINDOW_HOURS": ("offers", "abandon_window_hours"),
    "LOYALTY_MIN_SCORE": ("offers", "loyalty_min_score"),
    "BUNDLE_MIDPOINT_CEILING": ("offers", "bundle_midpoint_ceiling"),
    "LAST_MINUTE_WINDOW_HOURS": ("offers", "last_minute_window_hours"),
    "FALLBACK_CATEGORY": ("offers", "fallback_category"),
}


def load_config(overrides: Dict[str, Any] | None = None) -> EngineConfig:
    """Build an ``EngineConfig`` from defaults, environment, then ``overrides``.

    ``overrides`` is a nested mapping such as ``{"weights": {"budget": 0.4}}``.
    Invalid values surface as a pydantic ``ValidationError``.
    """
    sections: Dict[str, Dict[str, Any]] = {"weights": {}, "recommendation": {}, "offers": {}}
    applied: List[str] = []
    for suffix, (section, field) in _ENV_FIELDS.items():
        raw = os.getenv(_ENV_PREFIX + suffix)
        if raw is None or not raw.strip():
            continue
        sections[section][field] = raw.strip()
        applied.append(suffix)

    for section, values in (overrides or {}).items():
        if section not in sections:
            raise KeyError(f"Unknown config section: {section}")
        sections[section].update(values or {})

    config = EngineConfig.model_validate(sections)
    if applied:
        logger.info("Applied config overrides from environment: %s", ", ".join(applied))
    return config
