"""Caller-side helpers for the offers a user is looking at.

The offer generator is stateless; claiming and dismissing happen in the
caller's list. These helpers return new lists and leave their input untouched.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from trip_personalization.schemas import TargetedOffer, as_utc

_URGENCY_RANK = {"high": 0, "medium": 1, "low": 2}


def claim_offer(offers: Iterable[TargetedOffer], offer_id: str) -> List[TargetedOffer]:
    """Mark ``offer_id`` as claimed. Claiming is one-way."""
    return [
        offer.model_copy(update={"claimed": True}) if offer.id == offer_id else offer
        for offer in offers
    ]


def dismiss_offer(offers: Iterable[TargetedOffer], offer_id: str) -> List[TargetedOffer]:
    return [offer for offer in offers if offer.id != offer_id]


def active_offers(offers: Iterable[TargetedOffer], now: datetime) -> List[TargetedOffer]:
    """Offers still valid at ``now``, most urgent first (stable otherwise)."""
    now = as_utc(now)
    live = [offer for offer in offers if as_utc(offer.valid_until) > now]
    return sorted(live, key=lambda offer: _URGENCY_RANK.get(offer.urgency, len(_URGENCY_RANK)))


def format_time_remaining(valid_until: datetime, now: datetime) -> str:
    diff = as_utc(valid_until) - as_utc(now)
    seconds = diff.total_seconds()
    if seconds <= 0:
        return "Expired"

    hours = int(seconds // 3600)
    days = hours // 24
    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} left"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} left"
    minutes = int(seconds // 60)
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} left"
    return "Less than a minute left"
