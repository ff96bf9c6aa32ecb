"""
Flight Price Providers - Airline sources for current fares
"""
from .base import FlightProvider, ProviderResult, ProviderError, ProviderStatus
from .ryanair import RyanairProvider
from .easyjet import EasyJetProvider
from .wizzair import WizzAirProvider
from .manager import ProviderManager, provider_manager, select_best_candidate

__all__ = [
    "FlightProvider",
    "ProviderResult",
    "ProviderError",
    "ProviderStatus",
    "RyanairProvider",
    "EasyJetProvider",
    "WizzAirProvider",
    "ProviderManager",
    "provider_manager",
    "select_best_candidate",
]
