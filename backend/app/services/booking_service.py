"""
Booking service: propose a new stay, extend an existing one.

CONCURRENCY STRATEGY: Per-key Locks + Optimistic Version Check
==============================================================

Problem:
  Two guests ask for the same unit and nights at the same moment.
  Both read the unit's bookings, both see the nights free, both insert.
  Result: Double booking.

Solution:
  Every use case runs its reads and its single write while holding locks:

  1. "guest:{guest_name}" (new bookings only), so one guest cannot slip into
     two units through two parallel requests
  2. "unit:{unit_id}", so availability is checked against a booking set that
     cannot change until our write has committed

  Locks are always taken in that order and extensions only take the unit
  lock, so two use cases never wait on each other in a cycle.

  Extensions additionally write with a version compare-and-swap. Under the
  unit lock it always succeeds; it only loses to a writer that bypassed the
  lock (another deployment, a manual fix in SQL). A lost CAS re-reads and
  re-validates up to MAX_RETRY_ATTEMPTS times.

Rule order (first failure wins):
  New booking: past check-in, guest already in this unit, guest booked
  anywhere, unit occupied.
  Extension: booking missing, extended stay overlaps another booking.
"""

import time
from datetime import date, datetime
from typing import Optional

from app.core.clock import Clock
from app.core.exceptions import InvalidBookingInput
from app.core.logging import get_logger
from app.core.metrics import booking_latency, db_retries, record_booking_attempt, record_extension_attempt
from app.domain.availability import AvailabilityChecker
from app.domain.guest_rules import guest_has_booking_anywhere, guest_has_booking_in_unit
from app.domain.interval import StayInterval
from app.domain.outcomes import Accepted, BookingOutcome, Rejected, RejectionKind
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository
from app.services.interfaces.unit_lock import UnitLock

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 3


def _require_text(field: str, value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidBookingInput(field, "must be a non-empty string")
    return value


def _require_int(field: str, value, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidBookingInput(field, "must be an integer")
    if minimum is not None and value < minimum:
        raise InvalidBookingInput(field, f"must be at least {minimum}")
    return value


def _require_date(field: str, value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise InvalidBookingInput(field, "must be a date")
    return value


class BookingService:
    def __init__(self, repository: BookingRepository, clock: Clock, unit_lock: UnitLock):
        self.repository = repository
        self.clock = clock
        self.unit_lock = unit_lock
        self.availability = AvailabilityChecker(repository)

    async def propose_new_booking(
        self,
        guest_name: str,
        unit_id: str,
        check_in_date: date,
        number_of_nights: int,
    ) -> BookingOutcome:
        """Create a booking if every rule passes. Never writes on rejection."""
        guest_name = _require_text("guest_name", guest_name)
        unit_id = _require_text("unit_id", unit_id)
        check_in_date = _require_date("check_in_date", check_in_date)
        number_of_nights = _require_int("number_of_nights", number_of_nights, minimum=1)
        stay = StayInterval.from_nights(check_in_date, number_of_nights)

        start = time.perf_counter()
        today = self.clock.today()

        async with self.unit_lock.hold(f"guest:{guest_name}"):
            async with self.unit_lock.hold(f"unit:{unit_id}"):
                outcome = await self._propose(guest_name, unit_id, stay, today)

        booking_latency.labels(operation="propose").observe(time.perf_counter() - start)

        if isinstance(outcome, Accepted):
            record_booking_attempt("accepted")
            logger.info(
                "booking_accepted",
                booking_id=outcome.booking.id,
                unit_id=unit_id,
                check_in=check_in_date.isoformat(),
                nights=number_of_nights,
            )
        else:
            record_booking_attempt(outcome.kind.value)
            logger.info("booking_rejected", unit_id=unit_id, kind=outcome.kind.value)
        return outcome

    async def _propose(
        self,
        guest_name: str,
        unit_id: str,
        stay: StayInterval,
        today: date,
    ) -> BookingOutcome:
        if stay.check_in < today:
            return Rejected.because(RejectionKind.PAST_CHECK_IN_DATE)

        same_unit = await self.repository.find_by_guest_and_unit(guest_name, unit_id)
        if guest_has_booking_in_unit(same_unit, guest_name, unit_id):
            return Rejected.because(RejectionKind.DUPLICATE_GUEST_UNIT_BOOKING)

        anywhere = await self.repository.find_by_guest(guest_name)
        if guest_has_booking_anywhere(anywhere, guest_name):
            return Rejected.because(RejectionKind.GUEST_ALREADY_BOOKED_ELSEWHERE)

        conflict = await self.availability.find_conflict(unit_id, stay)
        if conflict is not None:
            logger.debug("unit_conflict", unit_id=unit_id, conflicting_booking_id=conflict.id)
            return Rejected.because(RejectionKind.UNIT_UNAVAILABLE)

        booking = await self.repository.create(
            Booking.new(guest_name, unit_id, stay.check_in, stay.nights)
        )
        return Accepted(booking)

    async def extend_booking(self, booking_id: int, additional_nights: int) -> BookingOutcome:
        """
        Add nights to the end of an existing stay.
        Zero additional nights is a valid no-op extension.
        """
        booking_id = _require_int("booking_id", booking_id)
        additional_nights = _require_int("additional_nights", additional_nights, minimum=0)

        start = time.perf_counter()

        # unit_id never changes, so the lock can be chosen from an unlocked read
        current = await self.repository.find_by_id(booking_id)
        if current is None:
            outcome: BookingOutcome = Rejected.because(RejectionKind.BOOKING_NOT_FOUND)
        else:
            async with self.unit_lock.hold(f"unit:{current.unit_id}"):
                outcome = await self._extend(booking_id, additional_nights)

        booking_latency.labels(operation="extend").observe(time.perf_counter() - start)

        if isinstance(outcome, Accepted):
            record_extension_attempt("accepted")
            logger.info(
                "booking_extended",
                booking_id=booking_id,
                added_nights=additional_nights,
                check_out=outcome.booking.check_out_date.isoformat(),
            )
        else:
            record_extension_attempt(outcome.kind.value)
            logger.info("extension_rejected", booking_id=booking_id, kind=outcome.kind.value)
        return outcome

    async def _extend(self, booking_id: int, additional_nights: int) -> BookingOutcome:
        for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
            booking = await self.repository.find_by_id(booking_id)
            if booking is None:
                return Rejected.because(RejectionKind.BOOKING_NOT_FOUND)

            new_nights = booking.number_of_nights + additional_nights
            stay = StayInterval.from_nights(booking.check_in_date, new_nights)

            conflict = await self.availability.find_conflict(
                booking.unit_id, stay, exclude_booking_id=booking.id
            )
            if conflict is not None:
                logger.debug("extension_conflict", booking_id=booking_id, conflicting_booking_id=conflict.id)
                return Rejected.because(RejectionKind.EXTENSION_CONFLICT)

            written = await self.repository.update(
                booking.id,
                {"number_of_nights": new_nights, "check_out_date": stay.check_out},
                expected_version=booking.version,
            )
            if written:
                return Accepted(await self.repository.find_by_id(booking_id))

            db_retries.inc()
            logger.info("extension_retry", booking_id=booking_id, attempt=attempt, reason="version_conflict")

        return Rejected(
            kind=RejectionKind.EXTENSION_CONFLICT,
            reason="Booking was modified concurrently, please try again",
        )
