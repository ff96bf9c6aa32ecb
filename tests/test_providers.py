"""Tests for the airline providers and the provider manager."""
import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.services.providers import (
    EasyJetProvider,
    ProviderError,
    ProviderManager,
    ProviderStatus,
    RyanairProvider,
    WizzAirProvider,
    select_best_candidate,
)
from conftest import FixedProvider, candidate

DEPARTURE = date.today() + timedelta(days=21)


def test_best_candidate_is_cheapest():
    best = select_best_candidate([candidate(80), candidate(65), candidate(90)])

    assert best.price == Decimal("65")


def test_best_candidate_tie_keeps_first():
    first = candidate(65, flight_number="FR1")
    second = candidate(65, flight_number="FR2")

    assert select_best_candidate([candidate(70), first, second]) is first


def test_best_candidate_of_nothing():
    assert select_best_candidate([]) is None


@pytest.mark.asyncio
async def test_simulated_provider_schedule():
    provider = RyanairProvider(rng=random.Random(7))

    candidates = await provider.search("stn", "vlc", DEPARTURE)

    assert [c.flight_number for c in candidates] == ["FR1234", "FR5678", "FR9012", "FR3456", "FR7890"]
    assert all(c.price >= provider.fare_floor for c in candidates)
    assert all(c.price == c.price.quantize(Decimal("0.01")) for c in candidates)
    assert all(c.airline == "RYANAIR" and c.source == "ryanair" for c in candidates)
    assert candidates[0].booking_url.startswith(f"https://www.ryanair.com/gb/en/booking/home/STN/VLC/{DEPARTURE.isoformat()}")
    assert provider.status == ProviderStatus.HEALTHY


@pytest.mark.asyncio
async def test_simulated_provider_late_arrival_lands_next_day():
    candidates = await RyanairProvider(rng=random.Random(1)).search("STN", "VLC", DEPARTURE)
    late = candidates[-1]

    assert late.arrival_time.date() == DEPARTURE + timedelta(days=1)
    assert late.arrival_time > late.departure_time


@pytest.mark.asyncio
async def test_simulated_provider_outside_network_returns_nothing():
    assert await EasyJetProvider().search("STN", "TIA", DEPARTURE) == []
    assert await WizzAirProvider().search("STN", "VLC", DEPARTURE) == []


@pytest.mark.asyncio
async def test_simulated_provider_bad_schedule_raises_provider_error():
    provider = EasyJetProvider()
    provider.schedule = (("25:99", "10:00", "EZY0000"),)

    with pytest.raises(ProviderError):
        await provider.search("LGW", "VLC", DEPARTURE)


@pytest.mark.asyncio
async def test_manager_pools_in_provider_order():
    manager = ProviderManager(providers=[
        FixedProvider("second", [70, 60], priority=2),
        FixedProvider("first", [90], priority=1),
    ])

    candidates = await manager.fetch_candidates("STN", "VLC", DEPARTURE)

    assert [c.price for c in candidates] == [Decimal("90"), Decimal("70"), Decimal("60")]


@pytest.mark.asyncio
async def test_manager_skips_providers_off_route():
    manager = ProviderManager(providers=[
        FixedProvider("stansted", [70]),
        FixedProvider("gatwick", [50], routes=frozenset({("LGW", "VLC")})),
    ])

    candidates = await manager.fetch_candidates("STN", "VLC", DEPARTURE)

    assert [c.airline for c in candidates] == ["STANSTED"]
    assert await manager.fetch_candidates("LHR", "JFK", DEPARTURE) == []


@pytest.mark.asyncio
async def test_manager_failed_provider_contributes_nothing():
    manager = ProviderManager(providers=[
        FixedProvider("broken", [10], error=ProviderError("broken", "upstream 503")),
        FixedProvider("working", [75]),
    ])

    candidates = await manager.fetch_candidates("STN", "VLC", DEPARTURE)

    assert [c.price for c in candidates] == [Decimal("75")]
    assert manager.get_provider_stats()["broken"]["successful_searches"] == 0


@pytest.mark.asyncio
async def test_manager_slow_provider_times_out():
    slow = FixedProvider("slow", [10], delay=1.0)
    manager = ProviderManager(providers=[slow, FixedProvider("fast", [80])], timeout_seconds=0.05)

    candidates = await manager.fetch_candidates("STN", "VLC", DEPARTURE)

    assert [c.price for c in candidates] == [Decimal("80")]


@pytest.mark.asyncio
async def test_manager_search_sorts_by_price():
    manager = ProviderManager(providers=[FixedProvider("a", [80, 65]), FixedProvider("b", [90, 70])])

    candidates = await manager.search("STN", "VLC", DEPARTURE)

    assert [c.price for c in candidates] == [Decimal("65"), Decimal("70"), Decimal("80"), Decimal("90")]


def test_provider_degrades_after_repeated_failures():
    provider = FixedProvider("flaky", [])

    for _ in range(3):
        provider.record_failure(RuntimeError("boom"))
    assert provider.status == ProviderStatus.DEGRADED

    for _ in range(7):
        provider.record_failure(RuntimeError("boom"))
    assert provider.status == ProviderStatus.UNAVAILABLE
    assert not provider.is_available

    provider.reset_status()
    assert provider.status == ProviderStatus.HEALTHY


@pytest.mark.asyncio
async def test_unavailable_provider_is_not_queried():
    down = FixedProvider("down", [10])
    for _ in range(10):
        down.record_failure(RuntimeError("boom"))
    manager = ProviderManager(providers=[down, FixedProvider("up", [60])])

    candidates = await manager.fetch_candidates("STN", "VLC", DEPARTURE)

    assert [c.airline for c in candidates] == ["UP"]
