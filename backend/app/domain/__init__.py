"""
Booking conflict rules: intervals, guest identity, availability, outcomes.
"""

from app.domain.interval import StayInterval, conflicts_with
from app.domain.guest_rules import guest_has_booking_in_unit, guest_has_booking_anywhere
from app.domain.outcomes import Accepted, Rejected, RejectionKind, BookingOutcome

__all__ = [
    "StayInterval", "conflicts_with",
    "guest_has_booking_in_unit", "guest_has_booking_anywhere",
    "Accepted", "Rejected", "RejectionKind", "BookingOutcome",
]
