"""
Tracked Flight Schemas
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


class TrackedFlightCreate(BaseModel):
    """Schema for starting to track a route or a specific flight"""
    origin: str = Field(..., min_length=3, max_length=3)
    destination: str = Field(..., min_length=3, max_length=3)
    target_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    departure_date: date
    currency: str = Field("EUR", min_length=3, max_length=3)

    # Specific flight pin
    airline: Optional[str] = Field(None, max_length=50)
    flight_number: Optional[str] = Field(None, max_length=20)
    departure_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")

    is_round_trip: bool = False
    return_date: Optional[date] = None
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None
    preferred_time_start: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    preferred_time_end: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    airline_filter: Optional[str] = Field(None, max_length=50)
    max_stops: int = Field(0, ge=0, le=3)
    booking_url: Optional[str] = Field(None, max_length=500)

    # Price seen when the user picked the flight, seeds the history
    current_price: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_dates(self):
        if self.return_date and self.return_date < self.departure_date:
            raise ValueError("Return date must be after departure date")
        if self.date_range_start and self.date_range_end and self.date_range_end < self.date_range_start:
            raise ValueError("Date range end must be after date range start")
        return self

    @property
    def is_specific_flight(self) -> bool:
        return bool(self.flight_number and self.departure_time)


class PriceUpdateResponse(BaseModel):
    """A single recorded price"""
    id: UUID
    price: Decimal
    currency: str
    airline: Optional[str]
    flight_number: Optional[str]
    departure_time: Optional[datetime]
    recorded_at: datetime

    class Config:
        from_attributes = True


class TrackedFlightResponse(BaseModel):
    """Tracked flight with derived price statistics"""
    id: UUID
    origin: str
    destination: str
    target_price: Decimal
    currency: str
    departure_date: Optional[date]
    return_date: Optional[date]
    is_round_trip: bool
    airline: Optional[str]
    flight_number: Optional[str]
    airline_filter: str
    max_stops: int
    booking_url: Optional[str]
    is_active: bool
    last_notified_price: Optional[Decimal]
    last_notification_type: Optional[str]
    created_at: Optional[datetime]

    current_price: Optional[Decimal] = None
    lowest_price: Optional[Decimal] = None
    highest_price: Optional[Decimal] = None
    unread_notifications: int = 0
    price_updates: List[PriceUpdateResponse] = []

    class Config:
        from_attributes = True


class TrackedFlightCreatedResponse(BaseModel):
    message: str
    tracked_flight: TrackedFlightResponse
