"""SQLAlchemy Models"""
from app.models.user import User
from app.models.tracked_flight import TrackedFlight, PriceUpdate
from app.models.notification import Notification, UserPreferences

__all__ = [
    "User", "TrackedFlight", "PriceUpdate", "Notification", "UserPreferences",
]
