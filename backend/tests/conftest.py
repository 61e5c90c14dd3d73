"""
Pytest fixtures for the test database, HTTP client and booking data.

Each test gets fresh tables. In-memory SQLite by default; point
TEST_DATABASE_URL at PostgreSQL to run against the production dialect.
"""

import os
from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from nomadic.main import app
from nomadic.db.base import Base
from nomadic.db import session as db_session_module
from nomadic.db.session import get_db
from nomadic.models.booking import Booking
from nomadic.services.booking_service import business_today
from nomadic.services.interfaces.optimistic_admission import OptimisticAdmission
from nomadic.services.notification_service import get_notifier
from nomadic.services.pricing import calculate_booking_price
from nomadic.services.strategy_factory import get_admission

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {}


class FakeNotifier:
    """Records confirmation emails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_booking_confirmation(self, booking):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append(("customer", booking.id))
        return True

    async def send_admin_notification(self, booking):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append(("admin", booking.id))
        return True


def next_weekday(start: date, weekday: int) -> date:
    """First date on or after `start` falling on `weekday` (Monday == 0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def future_date(days: int = 10) -> date:
    return business_today() + timedelta(days=days)


def booking_payload(**overrides) -> dict:
    tents = overrides.get("number_of_tents", 2)
    payload = {
        "customer_name": "Layla Haddad",
        "customer_email": "layla@example.com",
        "customer_phone": "+971501234567",
        "booking_date": future_date().isoformat(),
        "location": "Desert",
        "number_of_tents": tents,
        "adults": 2,
        "children": 0,
        "sleeping_arrangements": [
            {"tent_number": n, "arrangement": "two-doubles"} for n in range(1, min(tents, 5) + 1)
        ],
        "add_ons": {"charcoal": False, "firewood": False, "portable_toilet": False},
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: FakeNotifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with the test session, no tent holds and a fake mailer."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_admission] = lambda: OptimisticAdmission()
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession):
    """Factory inserting a priced booking directly, bypassing admission."""

    async def _make(
        booking_date: date = None,
        location: str = "Desert",
        tents: int = 2,
        is_paid: bool = True,
        **fields,
    ) -> Booking:
        booking_date = booking_date or future_date()
        pricing = calculate_booking_price(tents, location, {}, False, booking_date=booking_date)
        values = dict(
            customer_name="Omar Saleh",
            customer_email="omar@example.com",
            customer_phone="+971509876543",
            booking_date=booking_date,
            location=location,
            number_of_tents=tents,
            adults=2,
            children=0,
            has_children=False,
            sleeping_arrangements=[{"tent_number": 1, "arrangement": "mix"}],
            add_ons={},
            selected_custom_add_ons=[],
            is_paid=is_paid,
            **pricing.as_dict(),
        )
        values.update(fields)
        booking = Booking(**values)
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _make



@pytest_asyncio.fixture
async def request_session_client(
    db_session: AsyncSession, notifier: FakeNotifier, monkeypatch
) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client whose requests open their own sessions through the real get_db,
    on the test database. Unhandled errors come back as 500 responses.
    """
    await db_session.rollback()
    monkeypatch.setattr(
        db_session_module,
        "AsyncSessionLocal",
        async_sessionmaker(db_session.bind, class_=AsyncSession, expire_on_commit=False),
    )
    app.dependency_overrides[get_admission] = lambda: OptimisticAdmission()
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
