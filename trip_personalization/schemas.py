from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

TravelStyle = Literal["adventure", "luxury", "budget", "culture", "nature", "city"]
OfferType = Literal["discount", "upgrade", "bundle", "early_bird", "last_minute", "loyalty"]
OfferValueType = Literal["percentage", "fixed", "upgrade"]
Urgency = Literal["low", "medium", "high"]
CartStage = Literal["product_view", "checkout", "payment"]


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware ones are returned as-is."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _Payload(BaseModel):
    # Storefront payloads arrive camelCased; everything is stored snake_cased.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ------- Preference side -------
class UserPreferences(_Payload):
    budget_range: Tuple[float, float] = Field(
        (5000.0, 50000.0), validation_alias=AliasChoices("budget_range", "budgetRange")
    )
    travel_style: TravelStyle = Field(
        "adventure", validation_alias=AliasChoices("travel_style", "travelStyle")
    )
    duration: Tuple[int, int] = (3, 7)
    interests: List[str] = Field(default_factory=list)
    preferred_destinations: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("preferred_destinations", "preferredDestinations"),
    )
    # Carried for the presentation layer; scoring ignores these.
    group_size: Literal["solo", "couple", "small_group", "large_group"] = Field(
        "couple", validation_alias=AliasChoices("group_size", "groupSize")
    )
    season_preference: Literal["spring", "summer", "fall", "winter", "any"] = Field(
        "any", validation_alias=AliasChoices("season_preference", "seasonPreference")
    )
    activity_types: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("activity_types", "activityTypes")
    )
    accommodation_preference: Literal["budget", "mid_range", "luxury", "unique"] = Field(
        "mid_range",
        validation_alias=AliasChoices("accommodation_preference", "accommodationPreference"),
    )


class TripCandidate(_Payload):
    id: str
    title: str = ""
    price: float
    category: str
    duration_days: int = Field(..., validation_alias=AliasChoices("duration_days", "durationDays", "duration"))
    highlights: List[str] = Field(default_factory=list)
    rating: float = 0.0
    location: str = ""
    is_on_sale: bool = Field(False, validation_alias=AliasChoices("is_on_sale", "isOnSale"))
    original_price: Optional[float] = Field(
        None, validation_alias=AliasChoices("original_price", "originalPrice")
    )


class PersonalizedTrip(TripCandidate):
    match_score: float = Field(0.0, validation_alias=AliasChoices("match_score", "matchScore"))
    personalized_reason: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("personalized_reason", "personalizedReason"),
    )
    is_recommended: bool = Field(False, validation_alias=AliasChoices("is_recommended", "isRecommended"))


# ------- Behavior side -------
class BookingRecord(_Payload):
    trip_id: str = Field(..., validation_alias=AliasChoices("trip_id", "tripId"))
    category: str = ""
    price: float = 0.0
    rating: Optional[float] = None
    booked_at: datetime = Field(..., validation_alias=AliasChoices("booked_at", "bookedAt"))


class AbandonedCart(_Payload):
    trip_id: str = Field(..., validation_alias=AliasChoices("trip_id", "tripId"))
    abandoned_at: datetime = Field(..., validation_alias=AliasChoices("abandoned_at", "abandonedAt"))
    stage: CartStage = "product_view"


class UserBehaviorData(_Payload):
    search_history: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("search_history", "searchHistory")
    )
    viewed_categories: Dict[str, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("viewed_categories", "viewedCategories")
    )
    price_range: Optional[Tuple[float, float]] = Field(
        None, validation_alias=AliasChoices("price_range", "priceRange")
    )
    booking_history: List[BookingRecord] = Field(
        default_factory=list, validation_alias=AliasChoices("booking_history", "bookingHistory")
    )
    wishlisted: List[str] = Field(default_factory=list)
    abandoned_carts: List[AbandonedCart] = Field(
        default_factory=list, validation_alias=AliasChoices("abandoned_carts", "abandonedCarts")
    )
    loyalty_score: float = Field(0.0, validation_alias=AliasChoices("loyalty_score", "loyaltyScore"))
    last_active_date: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("last_active_date", "lastActiveDate")
    )


class TargetedOffer(_Payload):
    id: str
    type: OfferType
    title: str = ""
    description: str = ""
    value: float
    value_type: OfferValueType = Field(..., validation_alias=AliasChoices("value_type", "valueType"))
    valid_until: datetime = Field(..., validation_alias=AliasChoices("valid_until", "validUntil"))
    target_reason: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("target_reason", "targetReason")
    )
    conditions: Optional[List[str]] = None
    trip_ids: Optional[List[str]] = Field(None, validation_alias=AliasChoices("trip_ids", "tripIds"))
    category_filters: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("category_filters", "categoryFilters")
    )
    is_personalized: bool = Field(True, validation_alias=AliasChoices("is_personalized", "isPersonalized"))
    urgency: Urgency = "medium"
    claimed: bool = False
    cta_text: str = Field("", validation_alias=AliasChoices("cta_text", "ctaText"))


# ------- Learning side -------
class LearningData(_Payload):
    viewed_trips: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("viewed_trips", "viewedTrips")
    )
    booked_trips: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("booked_trips", "bookedTrips")
    )
    wishlisted: List[str] = Field(default_factory=list)
    search_history: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("search_history", "searchHistory")
    )
    rating_history: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("rating_history", "ratingHistory")
    )


class RecentlyViewedItem(_Payload):
    id: str
    type: Literal["trip", "destination"] = "trip"
    title: str = ""
    image: str = ""
    location: Optional[str] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    viewed_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("viewed_at", "viewedAt"))


# ------- Response models -------
class PersonalizationResponse(BaseModel):
    generated_at: datetime
    recommendations: List[PersonalizedTrip] = Field(default_factory=list)
    offers: List[TargetedOffer] = Field(default_factory=list)
