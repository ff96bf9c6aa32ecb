"""
Provider Manager - Fans a route lookup out to every airline that flies it
"""
from typing import List, Optional, Dict, Iterable
from datetime import date
import asyncio
import logging
import time
from collections import defaultdict

from app.config import settings
from app.schemas.flight import PriceCandidate
from .base import FlightProvider, ProviderResult
from .ryanair import RyanairProvider
from .easyjet import EasyJetProvider
from .wizzair import WizzAirProvider

logger = logging.getLogger(__name__)


def select_best_candidate(candidates: Iterable[PriceCandidate]) -> Optional[PriceCandidate]:
    """Cheapest candidate; on equal prices the first one seen wins"""
    best: Optional[PriceCandidate] = None
    for candidate in candidates:
        if best is None or candidate.price < best.price:
            best = candidate
    return best


class ProviderManager:
    """
    Manages the airline price providers with:
    - Route-based provider selection
    - Concurrent lookups with a per-provider timeout
    - Settle-all pooling (a failed provider contributes nothing)
    - Provider health tracking
    """

    def __init__(
        self,
        providers: Optional[List[FlightProvider]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        if providers is None:
            providers = [
                RyanairProvider(),
                EasyJetProvider(),
                WizzAirProvider(),
            ]

        # Sort by priority (lower = higher priority); pooled results follow this order
        self._providers: List[FlightProvider] = sorted(providers, key=lambda p: p.priority)
        self._timeout_seconds = timeout_seconds or settings.PROVIDER_TIMEOUT_SECONDS

        # Track provider stats
        self._search_stats: Dict[str, Dict] = defaultdict(lambda: {
            "total_searches": 0,
            "successful_searches": 0,
            "total_results": 0,
            "avg_response_time_ms": 0,
        })

    @property
    def providers(self) -> List[FlightProvider]:
        """Get all registered providers"""
        return self._providers

    @property
    def available_providers(self) -> List[FlightProvider]:
        """Get providers that are configured and available"""
        return [
            p for p in self._providers
            if p.is_configured and p.is_available
        ]

    def get_provider(self, name: str) -> Optional[FlightProvider]:
        """Get a specific provider by name"""
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def operating_providers(self, origin: str, destination: str) -> List[FlightProvider]:
        """Available providers that fly origin -> destination"""
        return [p for p in self.available_providers if p.operates(origin, destination)]

    async def fetch_candidates(
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
        Query every provider on the route concurrently and pool their fares.

        Candidates keep provider order, then each provider's own order.
        Never raises for a provider failure or timeout.
        """
        providers = self.operating_providers(origin, destination)

        if not providers:
            logger.info(f"No provider operates {origin}->{destination}")
            return []

        logger.info(
            f"Searching {', '.join(p.name for p in providers)} for {origin}->{destination} "
            f"on {departure_date}{f' returning {return_date}' if return_date else ''} "
            f"({adults} adults, {children} children, {infants} infants)"
        )

        async def search_provider(provider: FlightProvider) -> ProviderResult:
            start = time.time()

            try:
                candidates = await asyncio.wait_for(
                    provider.search(
                        origin, destination, departure_date,
                        return_date, adults, children, infants,
                    ),
                    timeout=self._timeout_seconds,
                )
                response_time = (time.time() - start) * 1000
                self._update_stats(provider.name, True, len(candidates), response_time)

                return ProviderResult(
                    provider_name=provider.name,
                    candidates=candidates,
                    success=True,
                    response_time_ms=response_time,
                )
            except asyncio.TimeoutError:
                logger.warning(f"{provider.name} timed out after {self._timeout_seconds}s")
                provider.record_failure(TimeoutError(f"timed out after {self._timeout_seconds}s"))
                self._update_stats(provider.name, False, 0, 0)
                return ProviderResult(
                    provider_name=provider.name,
                    candidates=[],
                    success=False,
                    error_message="timeout",
                )
            except Exception as e:
                logger.warning(f"{provider.name} failed: {e}")
                self._update_stats(provider.name, False, 0, 0)
                return ProviderResult(
                    provider_name=provider.name,
                    candidates=[],
                    success=False,
                    error_message=str(e),
                )

        # Run all searches in parallel
        results = await asyncio.gather(
            *[search_provider(p) for p in providers],
            return_exceptions=True
        )

        all_candidates: List[PriceCandidate] = []
        for result in results:
            if isinstance(result, ProviderResult) and result.success:
                all_candidates.extend(result.candidates)
                logger.info(f"{result.provider_name}: {len(result.candidates)} fares")

        return all_candidates

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
        """Pooled fares sorted by price, for display"""
        candidates = await self.fetch_candidates(
            origin, destination, departure_date, return_date, adults, children, infants
        )
        return sorted(candidates, key=lambda c: c.price)

    def _update_stats(
        self,
        provider_name: str,
        success: bool,
        result_count: int,
        response_time_ms: float
    ):
        """Update provider statistics"""
        stats = self._search_stats[provider_name]
        stats["total_searches"] += 1

        if success:
            stats["successful_searches"] += 1
            stats["total_results"] += result_count

            # Rolling average response time
            n = stats["successful_searches"]
            old_avg = stats["avg_response_time_ms"]
            stats["avg_response_time_ms"] = old_avg + (response_time_ms - old_avg) / n

    def get_provider_stats(self) -> Dict[str, Dict]:
        """Get statistics for all providers"""
        result = {}

        for provider in self._providers:
            stats = self._search_stats[provider.name].copy()
            stats["status"] = provider.status.value
            stats["is_configured"] = provider.is_configured
            stats["is_available"] = provider.is_available
            stats["priority"] = provider.priority
            stats["routes"] = sorted(f"{o}-{d}" for o, d in provider.routes)

            if stats["total_searches"] > 0:
                stats["success_rate"] = (
                    stats["successful_searches"] / stats["total_searches"] * 100
                )
            else:
                stats["success_rate"] = 0.0

            result[provider.name] = stats

        return result

    async def health_check(self) -> Dict[str, bool]:
        """Check health of all providers"""
        results = {}

        for provider in self._providers:
            try:
                results[provider.name] = await provider.health_check()
            except Exception:
                results[provider.name] = False

        return results

    def reset_provider(self, provider_name: str):
        """Reset a provider's status (e.g., after fixing an issue)"""
        provider = self.get_provider(provider_name)
        if provider:
            provider.reset_status()
            logger.info(f"Reset {provider_name} provider status")


# Singleton instance for the application
provider_manager = ProviderManager()
