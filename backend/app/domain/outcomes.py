"""
Use-case outcomes. Business-rule failures are values, not exceptions.
"""

import enum
from dataclasses import dataclass
from typing import Union

from app.models.booking import Booking


class RejectionKind(str, enum.Enum):
    PAST_CHECK_IN_DATE = "past_check_in_date"
    DUPLICATE_GUEST_UNIT_BOOKING = "duplicate_guest_unit_booking"
    GUEST_ALREADY_BOOKED_ELSEWHERE = "guest_already_booked_elsewhere"
    UNIT_UNAVAILABLE = "unit_unavailable"
    BOOKING_NOT_FOUND = "booking_not_found"
    EXTENSION_CONFLICT = "extension_conflict"


REJECTION_REASONS = {
    RejectionKind.PAST_CHECK_IN_DATE: "The check-in date cannot be in the past",
    RejectionKind.DUPLICATE_GUEST_UNIT_BOOKING: "The given guest name cannot book the same unit multiple times",
    RejectionKind.GUEST_ALREADY_BOOKED_ELSEWHERE: "The same guest cannot be in multiple units at the same time",
    RejectionKind.UNIT_UNAVAILABLE: "For the given check-in date, the unit is already occupied",
    RejectionKind.BOOKING_NOT_FOUND: "Booking does not exist",
    RejectionKind.EXTENSION_CONFLICT: "Can not extend stay period, because this unit is already booked",
}


@dataclass(frozen=True)
class Accepted:
    booking: Booking


@dataclass(frozen=True)
class Rejected:
    kind: RejectionKind
    reason: str

    @classmethod
    def because(cls, kind: RejectionKind) -> "Rejected":
        return cls(kind=kind, reason=REJECTION_REASONS[kind])


BookingOutcome = Union[Accepted, Rejected]
