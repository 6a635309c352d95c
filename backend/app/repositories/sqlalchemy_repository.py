"""
SQLAlchemy implementation of the booking repository.

Writes commit immediately. The booking service calls them while holding the
unit lock, so the commit is the end of the check-then-write critical section.
"""

from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalars(self, query) -> list[Booking]:
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_guest_and_unit(self, guest_name: str, unit_id: str) -> list[Booking]:
        return await self._scalars(
            select(Booking).where(Booking.guest_name == guest_name, Booking.unit_id == unit_id)
        )

    async def find_by_guest(self, guest_name: str) -> list[Booking]:
        return await self._scalars(select(Booking).where(Booking.guest_name == guest_name))

    async def find_all(self, unit_id: str, exclude_id: Optional[int] = None) -> list[Booking]:
        query = select(Booking).where(Booking.unit_id == unit_id)
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        return await self._scalars(query.order_by(Booking.check_in_date.asc()))

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        # populate_existing: a retried extension must see the committed row,
        # not the copy cached in the identity map
        result = await self.db.execute(
            select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.commit()
        await self.db.refresh(booking)
        return booking

    async def update(self, booking_id: int, fields: Mapping[str, Any], expected_version: int) -> bool:
        result = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.version == expected_version)
            .values(**fields, version=Booking.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            return False
        await self.db.commit()
        return True
