"""
Ryanair Provider - Stansted based routes
"""
from decimal import Decimal

from .simulated import SimulatedAirlineProvider


class RyanairProvider(SimulatedAirlineProvider):
    name = "ryanair"
    airline = "RYANAIR"
    priority = 1

    routes = frozenset({
        ("STN", "VLC"), ("VLC", "STN"),
        ("STN", "VCE"), ("VCE", "STN"),
        ("STN", "TSF"), ("TSF", "STN"),
    })

    schedule = (
        ("06:30", "09:45", "FR1234"),
        ("09:15", "12:30", "FR5678"),
        ("14:20", "17:35", "FR9012"),
        ("18:45", "22:00", "FR3456"),
        ("21:10", "00:25", "FR7890"),
    )

    base_fare = Decimal("29.99")
    fare_step = Decimal("15")
    fare_variation = Decimal("20")
    fare_floor = Decimal("19.99")

    booking_url_template = (
        "https://www.ryanair.com/gb/en/booking/home/{origin}/{destination}/{date}/{adults}/0/{children}/{infants}"
    )
