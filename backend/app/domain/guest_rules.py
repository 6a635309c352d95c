"""
Guest identity rules. They look only at names and units, never at dates.

Both rules are kept even though the second implies the first: the engine
reports whichever fails first, and the per-unit message is the more specific
one for a guest retrying the same unit.
"""

from typing import Iterable


def guest_has_booking_in_unit(bookings: Iterable, guest_name: str, unit_id: str) -> bool:
    return any(b.guest_name == guest_name and b.unit_id == unit_id for b in bookings)


def guest_has_booking_anywhere(bookings: Iterable, guest_name: str) -> bool:
    return any(b.guest_name == guest_name for b in bookings)
