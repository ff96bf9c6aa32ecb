"""
Flight Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal


class PriceCandidate(BaseModel):
    """A single priced flight returned by a provider"""
    price: Decimal = Field(..., ge=0)
    currency: str = "EUR"
    airline: str
    flight_number: Optional[str] = None
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    booking_url: Optional[str] = None
    source: Optional[str] = None  # provider name

    class Config:
        from_attributes = True


class FlightSearchResponse(BaseModel):
    """Flight search response"""
    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date]
    adults: int
    children: int
    infants: int

    candidates: List[PriceCandidate]
    total_results: int

    cached: bool = False
    searched_at: datetime
