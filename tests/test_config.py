import pytest
from pydantic import ValidationError

from trip_personalization.config import DEFAULT_CONFIG, load_config


def test_defaults_match_storefront_constants():
    weights = DEFAULT_CONFIG.weights
    assert (weights.budget, weights.style, weights.duration, weights.interests, weights.destination) == (
        0.30,
        0.25,
        0.20,
        0.15,
        0.10,
    )
    assert weights.total() == pytest.approx(1.0)
    assert DEFAULT_CONFIG.recommendation.recommended_threshold == 0.7
    assert DEFAULT_CONFIG.offers.abandon_window_hours == 72
    assert DEFAULT_CONFIG.offers.last_minute_window_hours == 168


def test_environment_overrides_are_applied(monkeypatch):
    monkeypatch.setenv("TRIP_PERSONALIZATION_WEIGHT_BUDGET", "0.5")
    monkeypatch.setenv("TRIP_PERSONALIZATION_RECOMMENDED_THRESHOLD", "0.8")
    monkeypatch.setenv("TRIP_PERSONALIZATION_FALLBACK_CATEGORY", "nature")
    monkeypatch.setenv("TRIP_PERSONALIZATION_LOYALTY_MIN_SCORE", "  ")

    config = load_config()

    assert config.weights.budget == 0.5
    assert config.weights.style == 0.25
    assert config.recommendation.recommended_threshold == 0.8
    assert config.offers.fallback_category == "nature"
    assert config.offers.loyalty_min_score == 50


def test_explicit_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("TRIP_PERSONALIZATION_WEIGHT_BUDGET", "0.5")
    config = load_config({"weights": {"budget": 0.9}})

    assert config.weights.budget == 0.9


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        load_config({"weights": {"budget": -1}})
    with pytest.raises(ValidationError):
        load_config({"offers": {"abandon_valid_hours": 0}})
    with pytest.raises(ValidationError):
        load_config({"offers": {"unknown_knob": 1}})


def test_unknown_section_is_rejected():
    with pytest.raises(KeyError, match="scoring"):
        load_config({"scoring": {}})


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.weights.budget = 0.9  # type: ignore[misc]
