"""
Pytest fixtures for the booking engine, test database, and HTTP client.

Engine tests run against the in-memory repository. HTTP tests run against a
throwaway SQLite file (via aiosqlite), one session per request like the real
get_db dependency, so concurrent requests use separate transactions.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from app.main import app
from app.api.deps import get_clock
from app.core.clock import FixedClock
from app.db.base import Base
from app.db.session import get_db
from app.models.booking import Booking
from app.repositories.memory_repository import InMemoryBookingRepository
from app.services.booking_service import BookingService
from app.services.interfaces.local_unit_lock import LocalUnitLock
from app.services.strategy_factory import get_unit_lock

# Every test lives in January 2030 and "today" is the first of December 2029
TODAY = date(2029, 12, 1)


def jan(day: int) -> date:
    return date(2030, 1, day)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def unit_lock() -> LocalUnitLock:
    return LocalUnitLock(timeout=2.0)


@pytest.fixture
def repository() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def service(repository, clock, unit_lock) -> BookingService:
    return BookingService(repository, clock, unit_lock)


@pytest_asyncio.fixture
async def seed(repository):
    """Insert a booking directly, bypassing the rules."""

    async def _seed(guest_name: str, unit_id: str, check_in: date, nights: int) -> Booking:
        return await repository.create(Booking.new(guest_name, unit_id, check_in, nights))

    return _seed


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables in a fresh SQLite file, yield a session factory, dispose."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, clock, unit_lock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the database, clock, and unit lock swapped for test ones."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.rollback()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_unit_lock] = lambda: unit_lock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def stored_booking(client: AsyncClient) -> dict:
    """Alice in unit U1 for [Jan 1, Jan 4)."""
    response = await client.post(
        "/api/v1/bookings/",
        json={
            "guest_name": "Alice",
            "unit_id": "U1",
            "check_in_date": jan(1).isoformat(),
            "number_of_nights": 3,
        },
    )
    assert response.status_code == 200
    return response.json()
