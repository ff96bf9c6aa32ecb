"""
Simulated Airline Provider - Synthetic fares for a fixed daily schedule

Stands in for a real airline lookup: each departure gets a base fare that
climbs through the day, a random variation, and a floor price.
"""
from typing import List, Optional, Tuple
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
import random
import logging

from app.schemas.flight import PriceCandidate
from .base import FlightProvider, ProviderError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class SimulatedAirlineProvider(FlightProvider):
    """
    Shared fare generator for the airline providers.

    Subclasses set the schedule, the fare ladder and the booking URL template.
    """

    airline: str = "XX"
    currency: str = "EUR"

    # (departure HH:MM, arrival HH:MM, flight number)
    schedule: Tuple[Tuple[str, str, str], ...] = ()

    base_fare: Decimal = Decimal("0")
    fare_step: Decimal = Decimal("0")  # added per later departure
    fare_variation: Decimal = Decimal("0")  # full width of the random spread
    fare_floor: Decimal = Decimal("0")

    booking_url_template: str = ""

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self._rng = rng or random.Random()

    async def search(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: Optional[date] = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
    ) -> List[PriceCandidate]:
        origin, destination = origin.upper(), destination.upper()
        if not self.operates(origin, destination):
            return []

        try:
            candidates = [
                self._build_candidate(
                    index, departure, arrival, flight_number,
                    origin, destination, departure_date, return_date,
                    adults, children, infants,
                )
                for index, (departure, arrival, flight_number) in enumerate(self.schedule)
            ]
        except (ValueError, KeyError) as e:
            self.record_failure(e)
            raise ProviderError(self.name, f"Failed to build fares: {e}", e)

        self.record_success()
        logger.debug(f"{self.name} returned {len(candidates)} fares for {origin}->{destination} on {departure_date}")
        return candidates

    def _fare(self, index: int) -> Decimal:
        spread = Decimal(str(self._rng.random())) - Decimal("0.5")
        fare = self.base_fare + self.fare_step * index + spread * self.fare_variation
        return max(self.fare_floor, fare).quantize(CENT, rounding=ROUND_HALF_UP)

    def _build_candidate(
        self,
        index: int,
        departure: str,
        arrival: str,
        flight_number: str,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: Optional[date],
        adults: int,
        children: int,
        infants: int,
    ) -> PriceCandidate:
        departure_time = datetime.combine(departure_date, time.fromisoformat(departure), tzinfo=timezone.utc)
        arrival_time = datetime.combine(departure_date, time.fromisoformat(arrival), tzinfo=timezone.utc)
        if arrival_time < departure_time:
            # Lands after midnight
            arrival_time += timedelta(days=1)

        booking_url = self.booking_url_template.format(
            origin=origin,
            destination=destination,
            date=departure_date.isoformat(),
            return_date=return_date.isoformat() if return_date else "",
            adults=adults,
            children=children,
            infants=infants,
        )

        return PriceCandidate(
            price=self._fare(index),
            currency=self.currency,
            airline=self.airline,
            flight_number=flight_number,
            departure_time=departure_time,
            arrival_time=arrival_time,
            booking_url=booking_url,
            source=self.name,
        )
