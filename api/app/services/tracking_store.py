"""
Tracking Store - Reads and writes for tracked flights, prices, notifications and preferences
"""
from typing import List, Optional, Dict, Tuple
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID
import logging

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.models import TrackedFlight, PriceUpdate, Notification, UserPreferences, User

logger = logging.getLogger(__name__)


class TrackingStore:
    """
    Thin data access layer over one AsyncSession.

    Writes are appends or single-row updates; committing is left to the caller.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Tracked flights
    # ------------------------------------------------------------------

    async def active_tracked_flights(self) -> List[TrackedFlight]:
        result = await self.db.execute(
            select(TrackedFlight)
            .where(TrackedFlight.is_active.is_(True))
            .order_by(TrackedFlight.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_tracked_flight(self, flight_id: UUID, user_id: Optional[UUID] = None) -> Optional[TrackedFlight]:
        query = select(TrackedFlight).where(TrackedFlight.id == flight_id)
        if user_id is not None:
            query = query.where(TrackedFlight.user_id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_user_flights(self, user_id: UUID) -> List[TrackedFlight]:
        result = await self.db.execute(
            select(TrackedFlight)
            .where(TrackedFlight.user_id == user_id, TrackedFlight.is_active.is_(True))
            .order_by(TrackedFlight.created_at.desc())
        )
        return list(result.scalars().all())

    async def deactivate(self, flight_id: UUID, user_id: UUID) -> bool:
        """Soft delete; returns False when the flight is missing or not owned"""
        result = await self.db.execute(
            update(TrackedFlight)
            .where(TrackedFlight.id == flight_id, TrackedFlight.user_id == user_id)
            .values(is_active=False, updated_at=datetime.now(timezone.utc))
        )
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Price history
    # ------------------------------------------------------------------

    async def latest_price_update(self, flight_id: UUID) -> Optional[PriceUpdate]:
        result = await self.db.execute(
            select(PriceUpdate)
            .where(PriceUpdate.tracked_flight_id == flight_id)
            .order_by(PriceUpdate.recorded_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def price_history(self, flight_id: UUID, limit: Optional[int] = None) -> List[PriceUpdate]:
        query = (
            select(PriceUpdate)
            .where(PriceUpdate.tracked_flight_id == flight_id)
            .order_by(PriceUpdate.recorded_at.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def price_stats(self, flight_id: UUID) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        """Lowest and highest price ever recorded"""
        result = await self.db.execute(
            select(func.min(PriceUpdate.price), func.max(PriceUpdate.price))
            .where(PriceUpdate.tracked_flight_id == flight_id)
        )
        lowest, highest = result.one()
        return lowest, highest

    async def add_price_update(
        self,
        flight: TrackedFlight,
        price: Decimal,
        currency: Optional[str] = None,
        airline: Optional[str] = None,
        flight_number: Optional[str] = None,
        departure_time: Optional[datetime] = None,
    ) -> PriceUpdate:
        price_update = PriceUpdate(
            tracked_flight_id=flight.id,
            price=price,
            currency=currency or flight.currency or settings.DEFAULT_CURRENCY,
            airline=airline,
            flight_number=flight_number,
            departure_time=departure_time,
        )
        self.db.add(price_update)
        await self.db.flush()
        return price_update

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def add_notification(
        self,
        flight: TrackedFlight,
        message: str,
        notification_type: str,
        sent_via_in_app: bool,
        payload: dict,
    ) -> Notification:
        notification = Notification(
            user_id=flight.user_id,
            tracked_flight_id=flight.id,
            message=message,
            type=notification_type,
            is_read=False,
            sent_via_email=False,
            sent_via_in_app=sent_via_in_app,
            payload=payload,
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def list_notifications(self, user_id: UUID, limit: int = 50) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .options(selectinload(Notification.tracked_flight))
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def unread_counts(self, user_id: UUID) -> Dict[UUID, int]:
        """Unread notification count per tracked flight"""
        result = await self.db.execute(
            select(Notification.tracked_flight_id, func.count(Notification.id))
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .group_by(Notification.tracked_flight_id)
        )
        return {flight_id: count for flight_id, count in result.all()}

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        return result.rowcount > 0

    async def mark_all_read(self, user_id: UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount

    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
        )
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Users & preferences
    # ------------------------------------------------------------------

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_preferences(self, user_id: UUID) -> Optional[UserPreferences]:
        result = await self.db.execute(
            select(UserPreferences).where(UserPreferences.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_preferences(self, user_id: UUID) -> UserPreferences:
        """Preferences row, created with defaults on first read"""
        preferences = await self.find_preferences(user_id)
        if preferences is None:
            preferences = UserPreferences(
                user_id=user_id,
                email_notifications=True,
                in_app_notifications=True,
                currency=settings.DEFAULT_CURRENCY,
            )
            self.db.add(preferences)
            await self.db.flush()
            logger.info(f"Created default preferences for user {user_id}")
        return preferences
