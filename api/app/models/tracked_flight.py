"""
Tracked Flight & Price Update Models
"""
from sqlalchemy import Column, String, DateTime, Date, Numeric, Boolean, Integer, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from app.utils.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackedFlight(Base):
    __tablename__ = "tracked_flights"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    origin = Column(String(10), nullable=False, index=True)
    destination = Column(String(10), nullable=False, index=True)
    target_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")

    # Optional pin to one specific flight
    flight_number = Column(String(20))
    airline = Column(String(50))
    departure_time = Column(DateTime(timezone=True))

    departure_date = Column(Date)
    date_range_start = Column(Date)
    date_range_end = Column(Date)
    preferred_time_start = Column(String(5))  # HH:MM
    preferred_time_end = Column(String(5))
    is_round_trip = Column(Boolean, nullable=False, default=False)
    return_date = Column(Date)

    airline_filter = Column(String(50), nullable=False, default="ANY")
    max_stops = Column(Integer, nullable=False, default=0)
    booking_url = Column(String(500))

    # Soft delete flag, inactive flights are never checked again
    is_active = Column(Boolean, nullable=False, default=True)

    last_notified_price = Column(Numeric(10, 2))
    last_notification_type = Column(String(50))
    last_notified_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="tracked_flights")
    price_updates = relationship("PriceUpdate", back_populates="tracked_flight", order_by="PriceUpdate.recorded_at.desc()")

    @property
    def route(self) -> str:
        return f"{self.origin} → {self.destination}"

    def __repr__(self):
        return f"<TrackedFlight {self.origin}->{self.destination} @ €{self.target_price}>"


class PriceUpdate(Base):
    """One price observation; rows are only ever appended"""
    __tablename__ = "price_updates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tracked_flight_id = Column(
        Uuid(as_uuid=True), ForeignKey("tracked_flights.id"), nullable=False, index=True
    )

    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    airline = Column(String(50))
    flight_number = Column(String(20))
    departure_time = Column(DateTime(timezone=True))

    # Client-side default keeps microsecond ordering between back-to-back checks
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    # Relationships
    tracked_flight = relationship("TrackedFlight", back_populates="price_updates")

    def __repr__(self):
        return f"<PriceUpdate {self.tracked_flight_id} €{self.price} at {self.recorded_at}>"
