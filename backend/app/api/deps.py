"""
FastAPI dependencies wiring the booking service together.
Tests override get_clock and get_db to pin "today" and the database.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, SystemClock
from app.db.session import get_db
from app.repositories.booking_repository import BookingRepository
from app.repositories.sqlalchemy_repository import SqlAlchemyBookingRepository
from app.services.booking_service import BookingService
from app.services.interfaces.unit_lock import UnitLock
from app.services.strategy_factory import get_unit_lock

_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock


def get_booking_repository(db: AsyncSession = Depends(get_db)) -> BookingRepository:
    return SqlAlchemyBookingRepository(db)


def get_booking_service(
    repository: BookingRepository = Depends(get_booking_repository),
    clock: Clock = Depends(get_clock),
    unit_lock: UnitLock = Depends(get_unit_lock),
) -> BookingService:
    return BookingService(repository, clock, unit_lock)
