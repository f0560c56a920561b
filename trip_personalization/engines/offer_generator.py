"""Behavior-triggered targeted offers.

Every rule is evaluated independently against the behavior record, so one call
can emit anywhere from one offer (category affinity always fires) to five.
Offer ids are derived from the rule that produced them rather than generated,
which keeps repeated calls with the same input and ``now`` identical.
"""
from __future__ import annotations

import logging
import math
import os
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from trip_personalization.config import DEFAULT_CONFIG, EngineConfig, OfferRules
from trip_personalization.schemas import TargetedOffer, UserBehaviorData, as_utc

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PERSONALIZATION_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


def generate_offers(
    behavior: UserBehaviorData,
    now: datetime,
    config: EngineConfig | None = None,
) -> List[TargetedOffer]:
    """Return the offers ``behavior`` qualifies for as of ``now``.

    ``now`` is always supplied by the caller; the generator never reads the
    clock. Naive datetimes (here and inside ``behavior``) are taken as UTC.
    """
    rules = (config or DEFAULT_CONFIG).offers
    now = as_utc(now)

    candidates = [
        _abandoned_cart_offer(behavior, now, rules),
        _loyalty_offer(behavior, now, rules),
        _category_offer(behavior, now, rules),
        _budget_bundle_offer(behavior, now, rules),
        _last_minute_offer(behavior, now, rules),
    ]

    offers: List[TargetedOffer] = []
    seen_ids = set()
    for offer in candidates:
        if offer is None or offer.id in seen_ids:
            continue
        seen_ids.add(offer.id)
        offers.append(offer)

    logger.debug("Generated %d offers: %s", len(offers), ", ".join(o.id for o in offers))
    return offers


def top_category(viewed_categories: Dict[str, int], fallback: str) -> str:
    """Most viewed category; the first one encountered wins a tie."""
    best: Optional[str] = None
    best_count = 0
    for category, count in viewed_categories.items():
        if best is None or count > best_count:
            best, best_count = category, count
    return best if best is not None else fallback


def _abandoned_cart_offer(behavior: UserBehaviorData, now: datetime, rules: OfferRules) -> Optional[TargetedOffer]:
    if not behavior.abandoned_carts:
        return None
    recent = max(behavior.abandoned_carts, key=lambda cart: as_utc(cart.abandoned_at))
    # A cart stamped after ``now`` is clock skew; treat it as just abandoned.
    age = max(timedelta(0), now - as_utc(recent.abandoned_at))
    if age > timedelta(hours=rules.abandon_window_hours):
        logger.debug("Most recent abandoned cart %s is %s old; skipping recovery", recent.trip_id, age)
        return None

    pct = rules.abandon_discount_pct
    return TargetedOffer(
        id=f"abandon-recovery-{recent.trip_id}",
        type="discount",
        title="Complete Your Booking!",
        description=f"Get {pct:g}% off the trip you were viewing. Limited time offer!",
        value=pct,
        value_type="percentage",
        valid_until=now + timedelta(hours=rules.abandon_valid_hours),
        target_reason=["You left a trip in your cart", "Special recovery discount"],
        trip_ids=[recent.trip_id],
        urgency="high",
        cta_text=f"Claim {pct:g}% Off",
    )


def _loyalty_offer(behavior: UserBehaviorData, now: datetime, rules: OfferRules) -> Optional[TargetedOffer]:
    if not behavior.loyalty_score > rules.loyalty_min_score:
        return None
    return TargetedOffer(
        id="loyalty-reward",
        type="loyalty",
        title="Loyal Traveler Bonus",
        description="You've been amazing! Here's a special upgrade just for you.",
        value=1,
        value_type="upgrade",
        valid_until=now + timedelta(hours=rules.loyalty_valid_hours),
        target_reason=["Loyal customer reward", f"{len(behavior.booking_history)} trips completed"],
        urgency="medium",
        cta_text="Claim Upgrade",
    )


def _category_offer(behavior: UserBehaviorData, now: datetime, rules: OfferRules) -> TargetedOffer:
    category = top_category(behavior.viewed_categories, rules.fallback_category)
    pct = rules.category_discount_pct
    return TargetedOffer(
        id=f"category-{category}",
        type="discount",
        title=f"{category[:1].upper()}{category[1:]} Lover's Deal",
        description=f"{pct:g}% off all {category} trips. Perfect match for your interests!",
        value=pct,
        value_type="percentage",
        valid_until=now + timedelta(hours=rules.category_valid_hours),
        target_reason=[f"You love {category} trips", "Based on your browsing history"],
        category_filters=[category],
        urgency="medium",
        cta_text=f"Get {pct:g}% Off",
    )


def _budget_bundle_offer(behavior: UserBehaviorData, now: datetime, rules: OfferRules) -> Optional[TargetedOffer]:
    if behavior.price_range is None:
        return None
    low, high = behavior.price_range
    midpoint = (low + high) / 2
    if not math.isfinite(midpoint) or midpoint >= rules.bundle_midpoint_ceiling:
        return None

    value = rules.bundle_value
    return TargetedOffer(
        id="budget-bundle",
        type="bundle",
        title="Budget Explorer Bundle",
        description=f"Book {rules.bundle_min_trips} trips and save {value:g} total. Great value for smart travelers!",
        value=value,
        value_type="fixed",
        valid_until=now + timedelta(hours=rules.bundle_valid_hours),
        target_reason=["Perfect for your budget", "Multi-trip savings"],
        conditions=[
            f"Book {rules.bundle_min_trips} or more trips",
            f"Minimum {rules.bundle_min_price_per_trip:g} per trip",
        ],
        urgency="low",
        cta_text=f"Save {value:g}",
    )


def _last_minute_offer(behavior: UserBehaviorData, now: datetime, rules: OfferRules) -> Optional[TargetedOffer]:
    window = timedelta(hours=rules.last_minute_window_hours)
    spontaneous = any(abs(as_utc(b.booked_at) - now) < window for b in behavior.booking_history)
    if not spontaneous:
        return None

    pct = rules.last_minute_discount_pct
    return TargetedOffer(
        id="last-minute",
        type="last_minute",
        title="Spontaneous Traveler Special",
        description=f"Flash sale! {pct:g}% off trips departing in the next {rules.last_minute_departure_days} days.",
        value=pct,
        value_type="percentage",
        valid_until=now + timedelta(hours=rules.last_minute_valid_hours),
        target_reason=["You love spontaneous trips", "Limited time flash sale"],
        conditions=[f"Departing within {rules.last_minute_departure_days} days"],
        urgency="high",
        cta_text="Flash Sale!",
    )
