"""
Tracked Flight Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Sequence
from datetime import datetime, time, timezone
from decimal import Decimal
from uuid import UUID
import logging

from app.config import settings
from app.utils.database import get_db
from app.routers.auth import get_current_user
from app.models import User, TrackedFlight, PriceUpdate
from app.schemas.price_check import PriceCheckResult
from app.schemas.tracking import (
    TrackedFlightCreate,
    TrackedFlightResponse,
    TrackedFlightCreatedResponse,
    PriceUpdateResponse,
)
from app.services.price_checker import PriceChecker, get_price_checker
from app.services.price_decision import resolve_current_price
from app.services.tracking_store import TrackingStore

router = APIRouter()
logger = logging.getLogger(__name__)

_DERIVED_FIELDS = {"current_price", "lowest_price", "highest_price", "unread_notifications", "price_updates"}


def _flight_response(
    flight: TrackedFlight,
    current_price: Optional[Decimal] = None,
    lowest_price: Optional[Decimal] = None,
    highest_price: Optional[Decimal] = None,
    unread_notifications: int = 0,
    history: Sequence[PriceUpdate] = (),
) -> TrackedFlightResponse:
    # Built column by column so the price_updates relationship is never lazy loaded
    data = {
        name: getattr(flight, name)
        for name in TrackedFlightResponse.model_fields
        if name not in _DERIVED_FIELDS
    }
    return TrackedFlightResponse(
        **data,
        current_price=current_price,
        lowest_price=lowest_price,
        highest_price=highest_price,
        unread_notifications=unread_notifications,
        price_updates=[PriceUpdateResponse.model_validate(update) for update in history],
    )


async def _owned_flight(store: TrackingStore, flight_id: UUID, user: User) -> TrackedFlight:
    flight = await store.get_tracked_flight(flight_id, user_id=user.id)
    if flight is None or not flight.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tracked flight not found"
        )
    return flight


@router.post("", response_model=TrackedFlightCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_tracked_flight(
    request: TrackedFlightCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Start tracking a route, or one specific flight when flight number and time are given.
    The first price update is the price the user saw, or a seed above the target.
    """
    departure_time = None
    if request.is_specific_flight:
        departure_time = datetime.combine(
            request.departure_date, time.fromisoformat(request.departure_time), tzinfo=timezone.utc
        )

    flight = TrackedFlight(
        user_id=current_user.id,
        origin=request.origin.upper(),
        destination=request.destination.upper(),
        target_price=request.target_price,
        currency=request.currency.upper(),
        flight_number=request.flight_number.upper() if request.flight_number else None,
        airline=request.airline,
        departure_time=departure_time,
        departure_date=request.departure_date,
        date_range_start=request.date_range_start,
        date_range_end=request.date_range_end,
        preferred_time_start=request.preferred_time_start,
        preferred_time_end=request.preferred_time_end,
        is_round_trip=request.is_round_trip,
        return_date=request.return_date if request.is_round_trip else None,
        airline_filter=(request.airline_filter or request.airline or "ANY").upper(),
        max_stops=request.max_stops,
        booking_url=request.booking_url,
        is_active=True,
    )
    db.add(flight)
    await db.flush()

    initial_price = resolve_current_price(
        None, request.target_price, None, settings.FALLBACK_PRICE_MULTIPLIER
    ) if request.current_price is None else request.current_price

    await TrackingStore(db).add_price_update(
        flight,
        initial_price,
        currency=flight.currency,
        airline=request.airline,
        flight_number=flight.flight_number,
        departure_time=departure_time,
    )
    await db.commit()
    await db.refresh(flight)

    logger.info(f"User {current_user.id} started tracking {flight.route} at target €{flight.target_price}")

    return TrackedFlightCreatedResponse(
        message="Flight tracking started",
        tracked_flight=_flight_response(
            flight,
            current_price=initial_price,
            lowest_price=initial_price,
            highest_price=initial_price,
        ),
    )


@router.get("", response_model=List[TrackedFlightResponse])
async def list_tracked_flights(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Active tracked flights, newest first, with price statistics
    """
    store = TrackingStore(db)
    flights = await store.list_user_flights(current_user.id)
    unread = await store.unread_counts(current_user.id)

    responses = []
    for flight in flights:
        latest = await store.latest_price_update(flight.id)
        lowest, highest = await store.price_stats(flight.id)
        responses.append(_flight_response(
            flight,
            current_price=latest.price if latest else None,
            lowest_price=lowest,
            highest_price=highest,
            unread_notifications=unread.get(flight.id, 0),
        ))

    return responses


@router.get("/{flight_id}", response_model=TrackedFlightResponse)
async def get_tracked_flight(
    flight_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    One tracked flight with its price history (newest first)
    """
    store = TrackingStore(db)
    flight = await _owned_flight(store, flight_id, current_user)

    history = await store.price_history(flight.id, limit=100)
    lowest, highest = await store.price_stats(flight.id)
    unread = await store.unread_counts(current_user.id)

    return _flight_response(
        flight,
        current_price=history[0].price if history else None,
        lowest_price=lowest,
        highest_price=highest,
        unread_notifications=unread.get(flight.id, 0),
        history=history,
    )


@router.delete("/{flight_id}")
async def stop_tracking(
    flight_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Stop tracking a flight. History and notifications are kept.
    """
    if not await TrackingStore(db).deactivate(flight_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tracked flight not found"
        )

    await db.commit()
    logger.info(f"User {current_user.id} stopped tracking {flight_id}")

    return {"message": "Flight tracking stopped"}


@router.post("/{flight_id}/check", response_model=PriceCheckResult)
async def check_tracked_flight(
    flight_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    checker: PriceChecker = Depends(get_price_checker),
):
    """
    Run a price check for one flight right now
    """
    flight = await _owned_flight(TrackingStore(db), flight_id, current_user)

    try:
        return await checker.check_flight(db, flight)
    except Exception as e:
        await db.rollback()
        logger.error(f"Manual price check failed for {flight_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Price check failed"
        )
