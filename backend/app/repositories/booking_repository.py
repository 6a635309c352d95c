"""
Booking repository interface.
Allows swapping storage without changing booking rules.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from app.models.booking import Booking


class BookingRepository(ABC):
    """
    Implementations:
    - SqlAlchemyBookingRepository: async SQLAlchemy session (production)
    - InMemoryBookingRepository: process-local dict (tests, experiments)
    """

    @abstractmethod
    async def find_by_guest_and_unit(self, guest_name: str, unit_id: str) -> list[Booking]:
        pass

    @abstractmethod
    async def find_by_guest(self, guest_name: str) -> list[Booking]:
        pass

    @abstractmethod
    async def find_all(self, unit_id: str, exclude_id: Optional[int] = None) -> list[Booking]:
        """All bookings of a unit, minus `exclude_id` if given."""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def create(self, booking: Booking) -> Booking:
        """Persist a new booking and return it with its id assigned."""
        pass

    @abstractmethod
    async def update(self, booking_id: int, fields: Mapping[str, Any], expected_version: int) -> bool:
        """
        Write `fields` to the booking if its version is still `expected_version`.

        Returns:
            True if the row was updated (version bumped)
            False if the booking changed or vanished since it was read
        """
        pass
