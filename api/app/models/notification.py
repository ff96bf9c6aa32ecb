"""
Notification & User Preferences Models
"""
from sqlalchemy import Column, String, DateTime, Boolean, Text, JSON, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from app.utils.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    tracked_flight_id = Column(Uuid(as_uuid=True), ForeignKey("tracked_flights.id"), nullable=False)

    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False)  # below-target, generic-drop, rise-after-drop
    is_read = Column(Boolean, nullable=False, default=False)
    sent_via_email = Column(Boolean, nullable=False, default=False)
    sent_via_in_app = Column(Boolean, nullable=False, default=True)

    # "metadata" is reserved on declarative classes
    payload = Column("metadata", JSON, default=dict)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )

    # Relationships
    tracked_flight = relationship("TrackedFlight")

    def __repr__(self):
        return f"<Notification {self.type} for {self.tracked_flight_id}>"


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True)

    email_notifications = Column(Boolean, nullable=False, default=True)
    in_app_notifications = Column(Boolean, nullable=False, default=True)
    currency = Column(String(3), nullable=False, default="EUR")

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="preferences")

    def __repr__(self):
        return f"<UserPreferences {self.user_id}>"
