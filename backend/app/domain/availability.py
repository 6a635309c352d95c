"""
Availability checker: is an interval free in a unit?

Linear scan over the unit's bookings. Anything faster (an interval tree, a
range query) has to return exactly what `conflicts_with` would.
"""

from typing import Optional

from app.domain.interval import StayInterval, conflicts_with
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository


class AvailabilityChecker:
    def __init__(self, repository: BookingRepository):
        self.repository = repository

    async def find_conflict(
        self,
        unit_id: str,
        interval: StayInterval,
        exclude_booking_id: Optional[int] = None,
    ) -> Optional[Booking]:
        """First booking in `unit_id` overlapping `interval`, or None."""
        existing = await self.repository.find_all(unit_id, exclude_id=exclude_booking_id)
        for booking in existing:
            if conflicts_with(interval, booking, exclude_booking_id):
                return booking
        return None

    async def is_available(
        self,
        unit_id: str,
        interval: StayInterval,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        return await self.find_conflict(unit_id, interval, exclude_booking_id) is None
