"""
Flight Search Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from datetime import date, datetime, timezone
import logging

from app.config import settings
from app.utils.redis import get_redis
from app.schemas.flight import FlightSearchResponse
from app.services.providers import ProviderManager, provider_manager

router = APIRouter()
logger = logging.getLogger(__name__)


def get_provider_manager() -> ProviderManager:
    return provider_manager


@router.get("/search", response_model=FlightSearchResponse)
async def search_flights(
    origin: str = Query(..., min_length=3, max_length=3, description="Origin airport code (IATA)"),
    destination: str = Query(..., min_length=3, max_length=3, description="Destination airport code (IATA)"),
    departure_date: date = Query(..., description="Departure date (YYYY-MM-DD)"),
    return_date: Optional[date] = Query(None, description="Return date for round trip"),
    adults: int = Query(1, ge=1, le=9),
    children: int = Query(0, ge=0, le=9),
    infants: int = Query(0, ge=0, le=9),
    cache = Depends(get_redis),
    manager: ProviderManager = Depends(get_provider_manager),
):
    """
    Current fares from every airline on the route, cheapest first.
    Results are cached for CACHE_TTL_FLIGHTS seconds.
    """
    if departure_date < date.today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Departure date cannot be in the past"
        )

    if return_date and return_date < departure_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Return date must be after departure date"
        )

    origin, destination = origin.upper(), destination.upper()
    cache_key = f"flights:{origin}:{destination}:{departure_date}:{return_date}:{adults}:{children}:{infants}"

    cached_result = await cache.get(cache_key)
    if cached_result:
        logger.info(f"Cache HIT for flight search: {origin} -> {destination}")
        response = FlightSearchResponse.model_validate_json(cached_result)
        response.cached = True
        return response

    logger.info(f"Cache MISS - searching flights: {origin} -> {destination}")

    candidates = await manager.search(
        origin, destination, departure_date, return_date, adults, children, infants
    )

    response = FlightSearchResponse(
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        return_date=return_date,
        adults=adults,
        children=children,
        infants=infants,
        candidates=candidates,
        total_results=len(candidates),
        searched_at=datetime.now(timezone.utc),
    )

    try:
        await cache.setex(cache_key, settings.CACHE_TTL_FLIGHTS, response.model_dump_json())
    except Exception as e:
        logger.warning(f"Failed to cache flight search {cache_key}: {e}")

    return response
