from datetime import datetime, timedelta, timezone

from trip_personalization.engines.offer_generator import generate_offers
from trip_personalization.schemas import UserBehaviorData
from trip_personalization.tools.offer_lifecycle import (
    active_offers,
    claim_offer,
    dismiss_offer,
    format_time_remaining,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def _offers():
    behavior = UserBehaviorData(
        viewed_categories={"nature": 3},
        price_range=(4000, 8000),
        loyalty_score=75,
        abandoned_carts=[{"trip_id": "t1", "abandoned_at": NOW - timedelta(hours=3)}],
    )
    return generate_offers(behavior, NOW)


def test_claim_offer_returns_copy_with_flag_set():
    offers = _offers()
    claimed = claim_offer(offers, "loyalty-reward")

    assert [o.id for o in claimed] == [o.id for o in offers]
    assert next(o for o in claimed if o.id == "loyalty-reward").claimed is True
    assert all(o.claimed is False for o in offers)
    assert all(o.claimed is False for o in claimed if o.id != "loyalty-reward")


def test_claim_unknown_offer_changes_nothing():
    offers = _offers()
    assert claim_offer(offers, "missing") == offers


def test_dismiss_offer_removes_it_from_the_list():
    offers = _offers()
    remaining = dismiss_offer(offers, "category-nature")

    assert "category-nature" not in [o.id for o in remaining]
    assert len(remaining) == len(offers) - 1
    assert len(offers) == 4


def test_active_offers_drops_expired_and_puts_high_urgency_first():
    offers = _offers()

    assert [o.urgency for o in active_offers(offers, NOW)] == ["high", "medium", "medium", "low"]
    # the 24h recovery offer is gone two days later
    later = active_offers(offers, NOW + timedelta(days=2))
    assert [o.id for o in later] == ["loyalty-reward", "category-nature", "budget-bundle"]
    assert active_offers(offers, NOW + timedelta(days=30)) == []


def test_format_time_remaining():
    assert format_time_remaining(NOW, NOW) == "Expired"
    assert format_time_remaining(NOW - timedelta(hours=1), NOW) == "Expired"
    assert format_time_remaining(NOW + timedelta(days=5), NOW) == "5 days left"
    assert format_time_remaining(NOW + timedelta(hours=25), NOW) == "1 day left"
    assert format_time_remaining(NOW + timedelta(hours=23, minutes=59), NOW) == "23 hours left"
    assert format_time_remaining(NOW + timedelta(minutes=61), NOW) == "1 hour left"
    assert format_time_remaining(NOW + timedelta(minutes=2, seconds=5), NOW) == "2 minutes left"
    assert format_time_remaining(NOW + timedelta(seconds=61), NOW) == "1 minute left"
    assert format_time_remaining(NOW + timedelta(seconds=20), NOW) == "Less than a minute left"


def test_format_time_remaining_accepts_naive_datetimes():
    assert format_time_remaining(NOW.replace(tzinfo=None) + timedelta(hours=3), NOW) == "3 hours left"
