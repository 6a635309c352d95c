"""
Process-local booking repository.

Every method yields to the event loop once before touching state, like a
real database round trip would. Without a unit lock, concurrent use cases
interleave their reads and writes exactly as they would against Postgres.
"""

import asyncio
import itertools
from typing import Any, Mapping, Optional

from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository


class InMemoryBookingRepository(BookingRepository):
    def __init__(self):
        self._rows: dict[int, Booking] = {}
        self._ids = itertools.count(1)

    def _snapshot(self, booking: Booking) -> Booking:
        return Booking(
            id=booking.id,
            guest_name=booking.guest_name,
            unit_id=booking.unit_id,
            check_in_date=booking.check_in_date,
            number_of_nights=booking.number_of_nights,
            check_out_date=booking.check_out_date,
            version=booking.version,
        )

    def all(self) -> list[Booking]:
        """Copies of every stored booking, ordered by id."""
        return [self._snapshot(b) for _, b in sorted(self._rows.items())]

    async def _select(self, predicate) -> list[Booking]:
        await asyncio.sleep(0)
        rows = [b for b in self._rows.values() if predicate(b)]
        rows.sort(key=lambda b: (b.check_in_date, b.id))
        return [self._snapshot(b) for b in rows]

    async def find_by_guest_and_unit(self, guest_name: str, unit_id: str) -> list[Booking]:
        return await self._select(lambda b: b.guest_name == guest_name and b.unit_id == unit_id)

    async def find_by_guest(self, guest_name: str) -> list[Booking]:
        return await self._select(lambda b: b.guest_name == guest_name)

    async def find_all(self, unit_id: str, exclude_id: Optional[int] = None) -> list[Booking]:
        return await self._select(lambda b: b.unit_id == unit_id and b.id != exclude_id)

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        await asyncio.sleep(0)
        stored = self._rows.get(booking_id)
        return self._snapshot(stored) if stored is not None else None

    async def create(self, booking: Booking) -> Booking:
        await asyncio.sleep(0)
        booking.id = next(self._ids)
        if booking.version is None:
            booking.version = 1
        self._rows[booking.id] = self._snapshot(booking)
        return booking

    async def update(self, booking_id: int, fields: Mapping[str, Any], expected_version: int) -> bool:
        await asyncio.sleep(0)
        stored = self._rows.get(booking_id)
        if stored is None or stored.version != expected_version:
            return False
        for name, value in fields.items():
            setattr(stored, name, value)
        stored.version += 1
        return True
