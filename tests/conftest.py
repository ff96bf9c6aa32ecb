"""Pytest fixtures for API, price checker and worker tests."""

import asyncio
import os
from datetime import date, timedelta
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["SENDGRID_API_KEY"] = ""
os.environ["CRON_SECRET"] = ""
os.environ["PRICE_CHECK_DELAY_SECONDS"] = "0"
os.environ["NOTIFICATION_REPEAT_POLICY"] = "every_check"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import create_app
from app.models import PriceUpdate, TrackedFlight, User
from app.schemas.flight import PriceCandidate
from app.services.notification_dispatcher import DeliveryResult
from app.services.providers import FlightProvider
from app.services.price_checker import PriceChecker, get_price_checker
from app.utils.database import Base, get_db
from app.utils.security import create_access_token


def candidate(price, airline="RYANAIR", flight_number="FR1234", source="ryanair") -> PriceCandidate:
    return PriceCandidate(
        price=Decimal(str(price)),
        currency="EUR",
        airline=airline,
        flight_number=flight_number,
        booking_url=f"https://book.example.com/{flight_number}",
        source=source,
    )


class StaticPriceSource:
    """Price source returning canned candidates per route"""

    def __init__(self):
        self.fares = {}
        self.calls = []

    async def fetch_candidates(
        self, origin, destination, departure_date, return_date=None, adults=1, children=0, infants=0
    ):
        self.calls.append((origin, destination, departure_date, return_date))
        fares = self.fares.get((origin, destination), [])
        if isinstance(fares, Exception):
            raise fares
        return list(fares)


class FixedProvider(FlightProvider):
    """Provider with a fixed fare list, an optional delay and an optional error"""

    def __init__(self, name, prices, routes=frozenset({("STN", "VLC")}), priority=0, delay=0.0, error=None):
        super().__init__()
        self.name = name
        self.priority = priority
        self.routes = routes
        self._prices = prices
        self._delay = delay
        self._error = error

    async def search(self, origin, destination, departure_date, return_date=None, adults=1, children=0, infants=0):
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return [
            candidate(price, airline=self.name.upper(), flight_number=f"{self.name}{i}", source=self.name)
            for i, price in enumerate(self._prices)
        ]


class RecordingDispatcher:
    """Dispatcher that records emails instead of sending them"""

    def __init__(self, email_sent: bool = True):
        self.email_sent = email_sent
        self.sent = []

    async def deliver(self, email, channels):
        self.sent.append((email, channels))
        return DeliveryResult(email_sent=self.email_sent and channels.email, in_app=channels.in_app)


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def user(db_session):
    user = User(email="traveler@example.com", password_hash="external", name="Robin")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture()
async def other_user(db_session):
    user = User(email="someone-else@example.com", password_hash="external", name="Sam")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture()
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def make_tracked_flight(db_session, user):
    async def _make(
        origin="STN",
        destination="VLC",
        target_price="50.00",
        initial_price=None,
        owner=None,
        **fields,
    ) -> TrackedFlight:
        fields.setdefault("departure_date", date.today() + timedelta(days=30))
        fields.setdefault("airline_filter", "ANY")
        fields.setdefault("is_active", True)
        flight = TrackedFlight(
            user_id=(owner or user).id,
            origin=origin,
            destination=destination,
            target_price=Decimal(target_price),
            currency="EUR",
            **fields,
        )
        db_session.add(flight)
        await db_session.flush()
        if initial_price is not None:
            db_session.add(PriceUpdate(tracked_flight_id=flight.id, price=Decimal(initial_price), currency="EUR"))
        await db_session.commit()
        return flight

    return _make


@pytest.fixture()
def price_source():
    return StaticPriceSource()


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture()
def checker(price_source, dispatcher, session_factory):
    return PriceChecker(
        price_source=price_source,
        dispatcher=dispatcher,
        session_factory=session_factory,
        delay_seconds=0,
        repeat_policy="every_check",
    )


@pytest.fixture()
def app(session_factory, checker):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_checker] = lambda: checker
    return app


@pytest_asyncio.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
