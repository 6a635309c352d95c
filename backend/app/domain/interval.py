"""
Half-open stay intervals and the overlap predicate.

A stay occupies [check_in, check_out): the guest sleeps the nights starting
on check_in up to, but not including, the night of check_out. A checkout and
a new check-in on the same day therefore do not collide.

`conflicts_with` is the only place overlap is decided. Both the new-booking
path and the extension path go through it.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from app.core.exceptions import InvalidBookingInput


@dataclass(frozen=True)
class StayInterval:
    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        if self.check_out < self.check_in:
            raise InvalidBookingInput("check_out_date", "must not be before check_in_date")

    @classmethod
    def from_nights(cls, check_in: date, nights: int) -> "StayInterval":
        if nights < 0:
            raise InvalidBookingInput("number_of_nights", "must not be negative")
        try:
            check_out = check_in + timedelta(days=nights)
        except OverflowError:
            raise InvalidBookingInput("number_of_nights", "stay ends past the last representable date") from None
        return cls(check_in, check_out)

    @classmethod
    def of(cls, booking) -> "StayInterval":
        """Interval occupied by a stored booking."""
        return cls(booking.check_in_date, booking.check_out_date)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def overlaps(self, other: "StayInterval") -> bool:
        return self.check_in < other.check_out and other.check_in < self.check_out


def conflicts_with(candidate: StayInterval, booking, exclude_booking_id: Optional[int] = None) -> bool:
    """
    True if `booking` occupies any night of `candidate`.
    The booking identified by `exclude_booking_id` never conflicts, which is
    how an extension avoids colliding with its own current stay.
    """
    if exclude_booking_id is not None and booking.id == exclude_booking_id:
        return False
    return candidate.overlaps(StayInterval.of(booking))
