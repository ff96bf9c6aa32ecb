"""
Price Checker - Periodic price checks for every active tracked flight

For each flight: read the last recorded price, ask the price source for
current fares, apply the alert rules, append the new price, and raise at most
one notification (in-app row plus optional email).
"""
from typing import List, Optional
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID
import asyncio
import logging
import threading

from prometheus_client import Counter
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.models import Notification, TrackedFlight
from app.schemas.flight import PriceCandidate
from app.schemas.price_check import PriceCheckResult, PriceCheckSummary
from app.services.email_templates import EmailNotification
from app.services.notification_dispatcher import (
    ChannelFlags,
    NotificationDispatcher,
    notification_dispatcher,
)
from app.services.price_decision import (
    PriceDecision,
    build_notification_message,
    evaluate_price_change,
    notification_metadata,
)
from app.services.providers import ProviderManager, provider_manager, select_best_candidate
from app.services.tracking_store import TrackingStore
from app.utils.database import AsyncSessionLocal

logger = logging.getLogger(__name__)

PRICE_CHECKS = Counter(
    "price_checks_total",
    "Tracked flight price checks",
    ["outcome"],
)

PRICE_NOTIFICATIONS = Counter(
    "price_notifications_total",
    "Price notifications raised",
    ["type"],
)

REPEAT_ON_CHANGE = "on_change"


def matches_tracked_flight(flight: TrackedFlight, candidate: PriceCandidate) -> bool:
    """Airline filter and flight-number pin of the tracked flight"""
    airline_filter = (flight.airline_filter or "ANY").upper()
    if airline_filter != "ANY" and candidate.airline.upper() != airline_filter:
        return False
    if flight.flight_number and candidate.flight_number:
        return candidate.flight_number.upper() == flight.flight_number.upper()
    return True


class PriceChecker:
    """
    Runs price checks against a price source and persists the outcome.

    Only one batch runs at a time per process; a second call while a batch is
    in flight returns an empty summary straight away.
    """

    def __init__(
        self,
        price_source: Optional[ProviderManager] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        session_factory: Optional[async_sessionmaker] = None,
        delay_seconds: Optional[float] = None,
        drop_threshold_percent: Optional[Decimal] = None,
        fallback_multiplier: Optional[Decimal] = None,
        repeat_policy: Optional[str] = None,
    ):
        self.price_source = price_source or provider_manager
        self.dispatcher = dispatcher or notification_dispatcher
        self.session_factory = session_factory or AsyncSessionLocal
        self.delay_seconds = settings.PRICE_CHECK_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.drop_threshold_percent = (
            settings.PRICE_DROP_THRESHOLD_PERCENT if drop_threshold_percent is None else drop_threshold_percent
        )
        self.fallback_multiplier = (
            settings.FALLBACK_PRICE_MULTIPLIER if fallback_multiplier is None else fallback_multiplier
        )
        if self.fallback_multiplier <= 1:
            raise ValueError("Fallback multiplier must keep the seed price above target")
        self.repeat_policy = repeat_policy or settings.NOTIFICATION_REPEAT_POLICY
        self._guard = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._guard.locked()

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def run_price_check(self) -> PriceCheckSummary:
        if not self._guard.acquire(blocking=False):
            logger.info("Price check already running, skipping...")
            return PriceCheckSummary.skipped()

        try:
            return await self._run_batch()
        except Exception as e:
            logger.error(f"Price check failed: {e}")
            return PriceCheckSummary(success=False, checked=0, notifications=0, results=[])
        finally:
            self._guard.release()

    async def _run_batch(self) -> PriceCheckSummary:
        logger.info("Starting automated price check...")

        async with self.session_factory() as db:
            flights = await TrackingStore(db).active_tracked_flights()
            targets = [(flight.id, flight.route) for flight in flights]

        logger.info(f"Checking {len(targets)} tracked flights")

        results: List[PriceCheckResult] = []
        notifications = 0

        for index, (flight_id, route) in enumerate(targets):
            if index and self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)

            try:
                result = await self._check_by_id(flight_id)
            except Exception as e:
                logger.error(f"Error checking {route} ({flight_id}): {e}")
                PRICE_CHECKS.labels(outcome="error").inc()
                result = PriceCheckResult(flight_id=flight_id, route=route, error=str(e) or type(e).__name__)

            results.append(result)
            if result.notification_sent:
                notifications += 1

        logger.info(f"Price check complete - {len(results)} flights checked, {notifications} notifications sent")

        return PriceCheckSummary(
            success=True,
            checked=len(results),
            notifications=notifications,
            results=results,
        )

    async def _check_by_id(self, flight_id: UUID) -> PriceCheckResult:
        async with self.session_factory() as db:
            try:
                flight = await TrackingStore(db).get_tracked_flight(flight_id)
                if flight is None or not flight.is_active:
                    raise LookupError(f"Tracked flight {flight_id} is no longer active")
                return await self.check_flight(db, flight)
            except Exception:
                await db.rollback()
                raise

    # ------------------------------------------------------------------
    # Single flight
    # ------------------------------------------------------------------

    async def check_flight(self, db: AsyncSession, flight: TrackedFlight) -> PriceCheckResult:
        """
        Check one tracked flight and commit its new price (and notification).

        Always appends exactly one price update. Email delivery happens after
        the notification is committed and never undoes it.
        """
        store = TrackingStore(db)

        latest = await store.latest_price_update(flight.id)
        previous_price = Decimal(latest.price) if latest is not None else None

        search_date = flight.departure_date or date.today()
        return_date = flight.return_date if flight.is_round_trip else None

        candidates = await self.price_source.fetch_candidates(
            flight.origin, flight.destination, search_date, return_date
        )
        best = select_best_candidate(c for c in candidates if matches_tracked_flight(flight, c))

        decision = evaluate_price_change(
            previous_price,
            Decimal(flight.target_price),
            best,
            drop_threshold_percent=self.drop_threshold_percent,
            fallback_multiplier=self.fallback_multiplier,
        )

        logger.info(f"{flight.route}: {previous_price}€ -> {decision.current_price}€")

        await store.add_price_update(
            flight,
            decision.current_price,
            currency=best.currency if best else None,
            airline=best.airline if best else None,
            flight_number=best.flight_number if best else None,
            departure_time=best.departure_time if best else None,
        )

        suppressed = decision.should_notify and self._is_repeat(flight, decision)
        if suppressed:
            logger.info(f"{flight.route}: skipping repeated {decision.notification_type.value} notification")

        notification = None
        email_enabled = False
        in_app_enabled = True

        if decision.should_notify and not suppressed:
            preferences = await store.find_preferences(flight.user_id)
            if preferences is not None:
                in_app_enabled = bool(preferences.in_app_notifications)
                email_enabled = bool(preferences.email_notifications)

            notification = await store.add_notification(
                flight,
                message=build_notification_message(decision, flight.route),
                notification_type=decision.notification_type.value,
                sent_via_in_app=in_app_enabled,
                payload=notification_metadata(decision),
            )
            flight.last_notified_price = decision.current_price
            flight.last_notification_type = decision.notification_type.value
            flight.last_notified_at = datetime.now(timezone.utc)
            PRICE_NOTIFICATIONS.labels(type=decision.notification_type.value).inc()

        await db.commit()
        PRICE_CHECKS.labels(outcome="ok").inc()
        flight_id, route = flight.id, flight.route

        if notification is not None and email_enabled:
            try:
                await self._send_email(db, store, flight, notification, decision, in_app_enabled)
            except Exception as e:
                logger.error(f"Failed to send email for {route} ({flight_id}): {e}")
                await db.rollback()

        return PriceCheckResult(
            flight_id=flight_id,
            route=route,
            previous_price=decision.previous_price,
            current_price=decision.current_price,
            price_drop=decision.price_drop,
            price_drop_percent=decision.price_drop_percent,
            notification_sent=notification is not None,
            notification_type=decision.notification_type.value if notification is not None else None,
            suppressed=suppressed,
        )

    def _is_repeat(self, flight: TrackedFlight, decision: PriceDecision) -> bool:
        if self.repeat_policy != REPEAT_ON_CHANGE:
            return False
        if flight.last_notification_type != decision.notification_type.value:
            return False
        if flight.last_notified_price is None:
            return False
        return Decimal(flight.last_notified_price) == decision.current_price

    async def _send_email(
        self,
        db: AsyncSession,
        store: TrackingStore,
        flight: TrackedFlight,
        notification: Notification,
        decision: PriceDecision,
        in_app_enabled: bool,
    ) -> None:
        user = await store.get_user(flight.user_id)
        if user is None:
            logger.warning(f"No user {flight.user_id} for tracked flight {flight.id}, skipping email")
            return

        delivery = await self.dispatcher.deliver(
            EmailNotification(
                to=user.email,
                user_name=user.name or "Traveler",
                notification_type=decision.notification_type.value,
                origin=flight.origin,
                destination=flight.destination,
                target_price=decision.target_price,
                new_price=decision.current_price,
                old_price=decision.previous_price,
                price_drop=decision.price_drop if decision.price_drop > 0 else None,
                price_drop_percent=decision.price_drop_percent if decision.price_drop_percent > 0 else None,
                booking_url=decision.best_candidate.booking_url if decision.best_candidate else None,
            ),
            ChannelFlags(email=True, in_app=in_app_enabled),
        )

        if delivery.email_sent:
            notification.sent_via_email = True
            await db.commit()


# Singleton instance for the application
price_checker = PriceChecker()


def get_price_checker() -> PriceChecker:
    """
    Dependency that provides the price checker
    Usage: checker: PriceChecker = Depends(get_price_checker)
    """
    return price_checker
