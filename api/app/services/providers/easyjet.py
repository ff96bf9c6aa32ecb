"""
EasyJet Provider - Gatwick based routes
"""
from decimal import Decimal

from .simulated import SimulatedAirlineProvider


class EasyJetProvider(SimulatedAirlineProvider):
    name = "easyjet"
    airline = "EASYJET"
    priority = 2

    routes = frozenset({
        ("LGW", "VLC"), ("VLC", "LGW"),
        ("LGW", "VCE"), ("VCE", "LGW"),
    })

    schedule = (
        ("07:15", "10:30", "EZY1234"),
        ("11:45", "15:00", "EZY5678"),
        ("16:30", "19:45", "EZY9012"),
        ("20:15", "23:30", "EZY3456"),
    )

    base_fare = Decimal("49.99")
    fare_step = Decimal("12")
    fare_variation = Decimal("25")
    fare_floor = Decimal("39.99")

    booking_url_template = (
        "https://www.easyjet.com/en/booking?dep={origin}&arr={destination}&date={date}"
        "&adults={adults}&children={children}&infants={infants}"
    )
