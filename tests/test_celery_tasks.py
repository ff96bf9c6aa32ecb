"""Tests for the scheduled price check task."""
from unittest.mock import AsyncMock, MagicMock, patch

from app.schemas.price_check import PriceCheckResult, PriceCheckSummary
from tasks.price_checks import check_tracked_flight_prices


def test_check_tracked_flight_prices_returns_json_summary():
    summary = PriceCheckSummary(
        success=True,
        checked=1,
        notifications=0,
        results=[PriceCheckResult(flight_id="6a1f4a52-1c58-4f7e-9a52-2f3f0c1f5e11", route="STN → VLC", current_price="71.50")],
    )
    checker = MagicMock()
    checker.run_price_check = AsyncMock(return_value=summary)
    engine = MagicMock()
    engine.dispose = AsyncMock()

    with patch("tasks.price_checks.price_checker", checker), patch("tasks.price_checks.engine", engine):
        result = check_tracked_flight_prices.run()

    assert result["success"] is True
    assert result["checked"] == 1
    assert result["results"][0]["current_price"] == "71.50"
    assert result["results"][0]["flight_id"] == "6a1f4a52-1c58-4f7e-9a52-2f3f0c1f5e11"
    engine.dispose.assert_awaited_once()


def test_engine_disposed_even_when_batch_fails():
    checker = MagicMock()
    checker.run_price_check = AsyncMock(side_effect=RuntimeError("db down"))
    engine = MagicMock()
    engine.dispose = AsyncMock()

    with patch("tasks.price_checks.price_checker", checker), patch("tasks.price_checks.engine", engine):
        try:
            check_tracked_flight_prices.run()
        except RuntimeError:
            pass

    engine.dispose.assert_awaited_once()


def test_beat_schedules_price_checks():
    from celery_app import app, PRICE_CHECK_INTERVAL_MINUTES

    entry = app.conf.beat_schedule["check-tracked-flight-prices"]
    assert entry["task"] == "tasks.price_checks.check_tracked_flight_prices"
    assert entry["schedule"].total_seconds() == PRICE_CHECK_INTERVAL_MINUTES * 60
