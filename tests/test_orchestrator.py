from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from trip_personalization.orchestrator import personalize
from trip_personalization.schemas import PersonalizationResponse, UserPreferences

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

PREFS_PAYLOAD = {
    "budgetRange": [5000, 10000],
    "travelStyle": "adventure",
    "duration": [2, 5],
    "interests": ["trekking"],
    "preferredDestinations": ["Manali"],
}

TRIPS_PAYLOAD = [
    {
        "id": "2",
        "title": "Kerala Backwater Serenity",
        "price": 12000,
        "duration": 4,
        "location": "Alleppey, Kerala",
        "rating": 4.9,
        "category": "nature",
        "highlights": ["Houseboat stay", "Backwater cruise"],
        "isOnSale": False,
    },
    {
        "id": "1",
        "title": "Manali Adventure Weekend",
        "price": 8500,
        "originalPrice": 10000,
        "duration": 3,
        "location": "Manali, Himachal Pradesh",
        "rating": 4.8,
        "category": "adventure",
        "highlights": ["River rafting", "Trekking"],
        "isOnSale": True,
    },
]

BEHAVIOR_PAYLOAD = {
    "viewedCategories": {"adventure": 9, "nature": 4},
    "priceRange": [3000, 9000],
    "loyaltyScore": 60,
    "bookingHistory": [
        {"tripId": "t1", "category": "adventure", "price": 9000, "rating": 5, "bookedAt": "2025-01-02T10:00:00+00:00"},
    ],
}


def test_personalize_ranks_trips_and_generates_offers_from_payloads():
    result = personalize(PREFS_PAYLOAD, TRIPS_PAYLOAD, BEHAVIOR_PAYLOAD, now=NOW)

    assert isinstance(result, PersonalizationResponse)
    assert result.generated_at == NOW
    assert [t.id for t in result.recommendations] == ["1", "2"]
    top = result.recommendations[0]
    assert top.match_score == pytest.approx(1.0)
    assert top.is_recommended is True
    assert top.personalized_reason == ["Fits your budget perfectly", "Perfect for adventure lovers"]
    assert [o.id for o in result.offers] == ["loyalty-reward", "category-adventure", "budget-bundle"]
    assert all(o.valid_until > NOW for o in result.offers)


def test_personalize_without_behavior_skips_offers():
    result = personalize(UserPreferences.model_validate(PREFS_PAYLOAD), TRIPS_PAYLOAD, now=NOW)

    assert result.offers == []
    assert len(result.recommendations) == 2


def test_personalize_defaults_now_to_current_utc_time():
    before = datetime.now(timezone.utc)
    result = personalize(PREFS_PAYLOAD, [], BEHAVIOR_PAYLOAD)

    assert result.generated_at >= before
    assert result.recommendations == []
    category_offer = next(o for o in result.offers if o.id == "category-adventure")
    assert category_offer.valid_until - result.generated_at == timedelta(days=5)


def test_personalize_rejects_unsupported_payload_types():
    with pytest.raises(TypeError, match="UserPreferences"):
        personalize(["not", "a", "profile"], TRIPS_PAYLOAD, now=NOW)  # type: ignore[arg-type]


def test_personalize_surfaces_structural_validation_errors():
    with pytest.raises(ValidationError):
        personalize(PREFS_PAYLOAD, [{"id": "broken", "price": "cheap", "category": "city", "duration": 2}], now=NOW)


def test_response_serialises_to_json():
    result = personalize(PREFS_PAYLOAD, TRIPS_PAYLOAD, BEHAVIOR_PAYLOAD, now=NOW)
    dumped = result.model_dump(mode="json")

    assert dumped["recommendations"][0]["original_price"] == 10000
    assert dumped["offers"][0]["valid_until"].startswith("2025-06-22T12:00:00")


def test_personalize_accepts_previously_ranked_trips():
    first = personalize(PREFS_PAYLOAD, TRIPS_PAYLOAD, now=NOW)
    changed = {**PREFS_PAYLOAD, "budgetRange": [5000, 15000], "travelStyle": "nature", "preferredDestinations": ["Kerala"]}
    again = personalize(changed, first.recommendations, now=NOW)

    assert [t.id for t in again.recommendations] == ["2", "1"]
    assert [t.match_score for t in again.recommendations] == [pytest.approx(0.85), pytest.approx(0.65)]
