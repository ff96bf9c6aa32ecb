"""
Base Flight Provider - Abstract interface for all price sources
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, FrozenSet
from datetime import date
from dataclasses import dataclass
from enum import Enum
import logging

from app.schemas.flight import PriceCandidate

logger = logging.getLogger(__name__)


class ProviderStatus(Enum):
    """Provider health status"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


@dataclass
class ProviderResult:
    """Result from a provider search"""
    provider_name: str
    candidates: List[PriceCandidate]
    success: bool
    error_message: Optional[str] = None
    response_time_ms: Optional[float] = None


class FlightProvider(ABC):
    """
    Abstract base class for flight price providers.

    Every airline source (Ryanair, EasyJet, WizzAir, ...) implements this interface.
    An empty list means "no service on that route/date"; transport or parse
    problems must raise ProviderError instead.
    """

    # Provider identification
    name: str = "base"
    priority: int = 0  # Lower number = higher priority

    # Directed (origin, destination) pairs this provider serves
    routes: FrozenSet[Tuple[str, str]] = frozenset()

    _max_failures_before_degraded: int = 3
    _max_failures_before_unavailable: int = 10

    def __init__(self):
        self._status = ProviderStatus.HEALTHY
        self._consecutive_failures = 0

    @property
    def status(self) -> ProviderStatus:
        """Get current provider status"""
        return self._status

    @property
    def is_available(self) -> bool:
        """Check if provider is available for requests"""
        return self._status != ProviderStatus.UNAVAILABLE

    @property
    def is_configured(self) -> bool:
        """Check if provider has required configuration (API keys, etc.)"""
        return True  # Override in subclasses

    def operates(self, origin: str, destination: str) -> bool:
        """Whether this provider flies the given route"""
        return (origin.upper(), destination.upper()) in self.routes

    def record_success(self):
        """Record a successful request"""
        self._consecutive_failures = 0
        self._status = ProviderStatus.HEALTHY

    def record_failure(self, error: Exception):
        """Record a failed request"""
        self._consecutive_failures += 1
        logger.warning(f"{self.name} provider failure #{self._consecutive_failures}: {error}")

        if self._consecutive_failures >= self._max_failures_before_unavailable:
            self._status = ProviderStatus.UNAVAILABLE
            logger.error(f"{self.name} provider marked as UNAVAILABLE after {self._consecutive_failures} failures")
        elif self._consecutive_failures >= self._max_failures_before_degraded:
            self._status = ProviderStatus.DEGRADED
            logger.warning(f"{self.name} provider marked as DEGRADED after {self._consecutive_failures} failures")

    def reset_status(self):
        """Reset provider status (e.g., after manual recovery)"""
        self._consecutive_failures = 0
        self._status = ProviderStatus.HEALTHY

    @abstractmethod
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
        """
        Search for priced flights.

        Args:
            origin: Origin airport IATA code (e.g., "STN")
            destination: Destination airport IATA code (e.g., "VLC")
            departure_date: Departure date
            return_date: Return date (optional for one-way)
            adults: Number of adult passengers
            children: Number of children
            infants: Number of infants

        Returns:
            List of price candidates, possibly empty

        Raises:
            ProviderError: If the search fails
        """
        pass

    async def health_check(self) -> bool:
        """
        Check if the provider is healthy and responsive.

        Default implementation returns True.
        Override for actual health checks.
        """
        return self.is_configured


class ProviderError(Exception):
    """Exception raised when a provider fails"""
    def __init__(self, provider_name: str, message: str, original_error: Optional[Exception] = None):
        self.provider_name = provider_name
        self.message = message
        self.original_error = original_error
        super().__init__(f"{provider_name}: {message}")
