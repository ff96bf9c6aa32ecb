"""Tests for the alert rules."""
from decimal import Decimal

import pytest

from app.services.price_decision import (
    NotificationType,
    build_notification_message,
    evaluate_price_change,
    notification_metadata,
    resolve_current_price,
)
from conftest import candidate


def test_below_target_takes_priority():
    decision = evaluate_price_change(Decimal("100"), Decimal("90"), candidate(85))

    assert decision.notification_type == NotificationType.BELOW_TARGET
    assert decision.current_price == Decimal("85")
    assert decision.price_drop == Decimal("15")
    assert decision.price_drop_percent == Decimal("15.00")


def test_below_target_without_history():
    decision = evaluate_price_change(None, Decimal("90"), candidate(85))

    assert decision.notification_type == NotificationType.BELOW_TARGET
    assert decision.price_drop == 0
    assert decision.price_drop_percent == 0


def test_price_equal_to_target_counts_as_below():
    decision = evaluate_price_change(Decimal("70"), Decimal("60"), candidate(60))

    assert decision.notification_type == NotificationType.BELOW_TARGET


def test_generic_drop_above_target():
    decision = evaluate_price_change(Decimal("100"), Decimal("50"), candidate(90))

    assert decision.notification_type == NotificationType.GENERIC_DROP
    assert decision.price_drop == Decimal("10")
    assert decision.price_drop_percent == Decimal("10.00")


def test_drop_below_threshold_is_silent():
    decision = evaluate_price_change(Decimal("100"), Decimal("50"), candidate("96.00"))

    assert decision.notification_type is None
    assert decision.price_drop_percent == Decimal("4.00")


def test_drop_exactly_at_threshold_notifies():
    decision = evaluate_price_change(Decimal("100"), Decimal("50"), candidate(95))

    assert decision.notification_type == NotificationType.GENERIC_DROP


def test_threshold_uses_unrounded_percent():
    # 4.996% rounds to 5.00 for display but stays below the threshold
    decision = evaluate_price_change(Decimal("100.08"), Decimal("10"), candidate("95.08"))

    assert decision.price_drop_percent == Decimal("5.00")
    assert decision.notification_type is None


def test_custom_drop_threshold():
    decision = evaluate_price_change(
        Decimal("100"), Decimal("50"), candidate(97), drop_threshold_percent=Decimal("2.5")
    )

    assert decision.notification_type == NotificationType.GENERIC_DROP


def test_rise_after_drop():
    decision = evaluate_price_change(Decimal("45"), Decimal("50"), candidate(60))

    assert decision.notification_type == NotificationType.RISE_AFTER_DROP
    assert decision.price_drop == Decimal("-15")
    assert decision.price_drop_percent < 0


def test_rise_while_above_target_is_silent():
    decision = evaluate_price_change(Decimal("70"), Decimal("50"), candidate(80))

    assert decision.notification_type is None


def test_unchanged_price_above_target_is_silent():
    decision = evaluate_price_change(Decimal("70"), Decimal("50"), candidate(70))

    assert decision.notification_type is None
    assert not decision.should_notify


def test_fallback_without_history_or_candidates():
    decision = evaluate_price_change(None, Decimal("100"), None)

    assert decision.current_price == Decimal("120.00")
    assert decision.previous_price is None
    assert decision.notification_type is None


def test_fallback_keeps_previous_price():
    decision = evaluate_price_change(Decimal("64.99"), Decimal("50"), None)

    assert decision.current_price == Decimal("64.99")
    assert decision.price_drop == 0
    assert decision.notification_type is None


def test_fallback_rounds_to_cents():
    assert resolve_current_price(None, Decimal("33.33"), None) == Decimal("40.00")
    assert resolve_current_price(None, Decimal("10.01"), None, Decimal("1.5")) == Decimal("15.02")


def test_live_fare_rounds_to_cents():
    assert resolve_current_price(Decimal("90.00"), Decimal("50"), candidate("85.555")) == Decimal("85.56")
    assert resolve_current_price(None, Decimal("50"), candidate("85.554")) == Decimal("85.55")


def test_messages():
    below = evaluate_price_change(Decimal("100"), Decimal("90"), candidate("85.00"))
    drop = evaluate_price_change(Decimal("100"), Decimal("50"), candidate("90.00"))
    rise = evaluate_price_change(Decimal("45.00"), Decimal("50"), candidate("60.00"))

    assert build_notification_message(below, "STN → VLC") == (
        "Price alert! STN → VLC is now €85.00 (below your target of €90)"
    )
    assert build_notification_message(drop, "STN → VLC") == "Price dropped! STN → VLC decreased by 10.0% to €90.00"
    assert build_notification_message(rise, "STN → VLC") == "Price increased! STN → VLC rose to €60.00 (was €45.00)"


def test_message_requires_a_notification():
    decision = evaluate_price_change(Decimal("70"), Decimal("50"), candidate(70))

    with pytest.raises(ValueError):
        build_notification_message(decision, "STN → VLC")


def test_metadata_is_json_friendly():
    decision = evaluate_price_change(Decimal("100"), Decimal("50"), candidate("90.00", flight_number="FR5678"))

    assert notification_metadata(decision) == {
        "oldPrice": 100.0,
        "newPrice": 90.0,
        "targetPrice": 50.0,
        "priceDrop": 10.0,
        "priceDropPercent": 10.0,
        "bookingUrl": "https://book.example.com/FR5678",
    }
