"""
WizzAir Provider - Tirana routes from London
"""
from decimal import Decimal

from .simulated import SimulatedAirlineProvider


class WizzAirProvider(SimulatedAirlineProvider):
    name = "wizzair"
    airline = "WIZZAIR"
    priority = 3

    routes = frozenset({
        ("LGW", "TIA"), ("TIA", "LGW"),
        ("STN", "TIA"), ("TIA", "STN"),
    })

    schedule = (
        ("06:45", "10:15", "W61234"),
        ("14:20", "17:50", "W65678"),
        ("19:30", "23:00", "W69012"),
    )

    base_fare = Decimal("79.99")
    fare_step = Decimal("20")
    fare_variation = Decimal("30")
    fare_floor = Decimal("59.99")

    booking_url_template = "https://wizzair.com/en-gb/flights/{origin}/{destination}/{date}"
