# debug_personalization.py
import json
from datetime import datetime, timedelta, timezone

from trip_personalization.orchestrator import personalize


def main():
    now = datetime.now(timezone.utc)
    prefs = {
        "budgetRange": [5000, 15000],
        "travelStyle": "adventure",
        "duration": [2, 5],
        "interests": ["Trekking", "Local cuisine"],
        "preferredDestinations": ["Manali", "Rishikesh"],
    }
    trips = [
        {
            "id": "1",
            "title": "Manali Adventure Weekend",
            "price": 8500,
            "originalPrice": 10000,
            "duration": 3,
            "location": "Manali, Himachal Pradesh",
            "rating": 4.8,
            "category": "adventure",
            "highlights": ["River rafting", "Trekking", "Paragliding", "Local cuisine"],
            "isOnSale": True,
        },
        {
            "id": "2",
            "title": "Kerala Backwater Serenity",
            "price": 12000,
            "duration": 4,
            "location": "Alleppey, Kerala",
            "rating": 4.9,
            "category": "nature",
            "highlights": ["Houseboat stay", "Backwater cruise", "Local fishing", "Ayurvedic spa"],
            "isOnSale": False,
        },
        {
            "id": "3",
            "title": "Rajasthan Royal Heritage",
            "price": 15000,
            "duration": 5,
            "location": "Jaipur-Udaipur, Rajasthan",
            "rating": 4.7,
            "category": "culture",
            "highlights": ["Palace tours", "Camel safari", "Cultural shows", "Heritage hotels"],
            "isOnSale": False,
        },
    ]
    behavior = {
        "searchHistory": ["Manali adventure", "Kerala backwaters", "Goa beaches"],
        "viewedCategories": {"adventure": 12, "nature": 7, "culture": 3},
        "priceRange": [5000, 15000],
        "bookingHistory": [
            {"tripId": "4", "category": "adventure", "price": 9000, "rating": 5, "bookedAt": (now - timedelta(days=3)).isoformat()},
        ],
        "wishlisted": ["5", "6"],
        "abandonedCarts": [
            {"tripId": "2", "abandonedAt": (now - timedelta(hours=20)).isoformat(), "stage": "checkout"},
        ],
        "loyaltyScore": 72,
        "lastActiveDate": now.isoformat(),
    }

    result = personalize(prefs, trips, behavior, now=now)
    print("➡️ Personalization returned:\n")
    print(json.dumps(result.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    main()
