"""
Tests for the booking use cases against the in-memory repository.
"""

from datetime import date

import pytest

from app.core.clock import FixedClock
from app.core.exceptions import InvalidBookingInput
from app.domain.availability import AvailabilityChecker
from app.domain.interval import StayInterval
from app.domain.outcomes import Accepted, Rejected, RejectionKind
from app.models.booking import Booking
from app.repositories.memory_repository import InMemoryBookingRepository
from app.services.booking_service import BookingService, MAX_RETRY_ATTEMPTS
from tests.conftest import TODAY, jan


def assert_rejected(outcome, kind: RejectionKind):
    assert isinstance(outcome, Rejected), outcome
    assert outcome.kind == kind


# --- propose_new_booking ---------------------------------------------------


@pytest.mark.asyncio
async def test_accepts_booking_and_derives_checkout(service, repository):
    outcome = await service.propose_new_booking("Alice", "U1", jan(1), 3)

    assert isinstance(outcome, Accepted)
    booking = outcome.booking
    assert booking.id is not None
    assert booking.check_out_date == jan(4)
    assert booking.number_of_nights == 3
    assert [b.id for b in repository.all()] == [booking.id]


@pytest.mark.asyncio
async def test_adjacent_bookings_are_both_accepted(service):
    first = await service.propose_new_booking("Alice", "U1", jan(1), 3)   # [Jan 1, Jan 4)
    second = await service.propose_new_booking("Bob", "U1", jan(4), 2)    # [Jan 4, Jan 6)

    assert isinstance(first, Accepted)
    assert isinstance(second, Accepted)


@pytest.mark.asyncio
async def test_booking_ending_on_existing_check_in_is_accepted(service, seed):
    await seed("Alice", "U1", jan(10), 2)
    outcome = await service.propose_new_booking("Bob", "U1", jan(7), 3)  # [Jan 7, Jan 10)
    assert isinstance(outcome, Accepted)


@pytest.mark.asyncio
async def test_overlapping_booking_is_rejected(service):
    await service.propose_new_booking("Alice", "U1", jan(1), 4)         # [Jan 1, Jan 5)
    outcome = await service.propose_new_booking("Bob", "U1", jan(3), 3)  # [Jan 3, Jan 6)

    assert_rejected(outcome, RejectionKind.UNIT_UNAVAILABLE)
    assert outcome.reason == "For the given check-in date, the unit is already occupied"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "check_in, nights",
    [
        (jan(1), 1),    # same first night
        (jan(3), 1),    # last night of the existing stay
        (date(2029, 12, 30), 3),  # starts before, ends inside
        (date(2029, 12, 30), 10),  # swallows the existing stay
    ],
)
async def test_any_shared_night_is_rejected(service, seed, check_in, nights):
    await seed("Alice", "U1", jan(1), 3)  # [Jan 1, Jan 4)
    outcome = await service.propose_new_booking("Bob", "U1", check_in, nights)
    assert_rejected(outcome, RejectionKind.UNIT_UNAVAILABLE)


@pytest.mark.asyncio
async def test_same_dates_in_another_unit_are_accepted(service, seed):
    await seed("Alice", "U1", jan(1), 3)
    outcome = await service.propose_new_booking("Bob", "U2", jan(1), 3)
    assert isinstance(outcome, Accepted)


@pytest.mark.asyncio
async def test_guest_cannot_book_a_second_unit(service):
    await service.propose_new_booking("Alice", "U1", jan(1), 3)
    outcome = await service.propose_new_booking("Alice", "U2", jan(20), 2)

    assert_rejected(outcome, RejectionKind.GUEST_ALREADY_BOOKED_ELSEWHERE)


@pytest.mark.asyncio
async def test_guest_cannot_book_same_unit_twice(service):
    await service.propose_new_booking("Alice", "U1", jan(1), 3)
    outcome = await service.propose_new_booking("Alice", "U1", jan(20), 2)

    # The per-unit rule is checked first and wins over the system-wide one
    assert_rejected(outcome, RejectionKind.DUPLICATE_GUEST_UNIT_BOOKING)


@pytest.mark.asyncio
async def test_guest_names_are_case_sensitive(service):
    await service.propose_new_booking("Alice", "U1", jan(1), 3)
    outcome = await service.propose_new_booking("alice", "U2", jan(1), 3)
    assert isinstance(outcome, Accepted)


@pytest.mark.asyncio
async def test_past_check_in_is_rejected(service):
    outcome = await service.propose_new_booking("Alice", "U1", date(2029, 11, 30), 2)
    assert_rejected(outcome, RejectionKind.PAST_CHECK_IN_DATE)


@pytest.mark.asyncio
async def test_past_check_in_wins_over_other_rules(service, seed):
    await seed("Alice", "U1", date(2029, 11, 29), 5)
    outcome = await service.propose_new_booking("Alice", "U1", date(2029, 11, 30), 1)
    assert_rejected(outcome, RejectionKind.PAST_CHECK_IN_DATE)


@pytest.mark.asyncio
async def test_check_in_today_is_accepted(service):
    outcome = await service.propose_new_booking("Alice", "U1", TODAY, 1)
    assert isinstance(outcome, Accepted)


@pytest.mark.asyncio
async def test_clock_is_injected(repository, unit_lock):
    late_clock = FixedClock(jan(15))
    service = BookingService(repository, late_clock, unit_lock)

    outcome = await service.propose_new_booking("Alice", "U1", jan(14), 2)
    assert_rejected(outcome, RejectionKind.PAST_CHECK_IN_DATE)


@pytest.mark.asyncio
async def test_clock_is_sampled_once_per_call(repository, unit_lock):
    class CountingClock(FixedClock):
        calls = 0

        def today(self):
            CountingClock.calls += 1
            return super().today()

    service = BookingService(repository, CountingClock(TODAY), unit_lock)
    await service.propose_new_booking("Alice", "U1", jan(1), 3)
    assert CountingClock.calls == 1


@pytest.mark.asyncio
async def test_rejections_leave_store_unchanged(service, repository):
    await service.propose_new_booking("Alice", "U1", jan(1), 4)
    before = [(b.id, b.check_out_date, b.version) for b in repository.all()]

    await service.propose_new_booking("Bob", "U1", jan(2), 2)           # overlap
    await service.propose_new_booking("Alice", "U2", jan(10), 2)        # guest elsewhere
    await service.propose_new_booking("Carol", "U1", date(2029, 1, 1), 2)  # past
    await service.extend_booking(999, 2)                                # missing

    after = [(b.id, b.check_out_date, b.version) for b in repository.all()]
    assert after == before


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "guest_name, unit_id, nights",
    [
        ("", "U1", 2),
        ("   ", "U1", 2),
        ("Alice", "", 2),
        ("Alice", "U1", 0),
        ("Alice", "U1", -3),
        ("Alice", "U1", True),
    ],
)
async def test_malformed_proposals_raise_before_any_rule(service, repository, guest_name, unit_id, nights):
    with pytest.raises(InvalidBookingInput):
        await service.propose_new_booking(guest_name, unit_id, jan(1), nights)
    assert repository.all() == []


@pytest.mark.asyncio
async def test_check_in_must_be_a_date(service):
    with pytest.raises(InvalidBookingInput):
        await service.propose_new_booking("Alice", "U1", "2030-01-01", 2)


# --- extend_booking ----------------------------------------------------------


@pytest.mark.asyncio
async def test_extension_does_not_conflict_with_itself(service, seed, repository):
    booking = await seed("Alice", "U1", jan(1), 3)  # [Jan 1, Jan 4), only booking in U1

    outcome = await service.extend_booking(booking.id, 2)

    assert isinstance(outcome, Accepted)
    assert outcome.booking.number_of_nights == 5
    assert outcome.booking.check_out_date == jan(6)
    stored = await repository.find_by_id(booking.id)
    assert stored.check_out_date == jan(6)
    assert stored.version == 2


@pytest.mark.asyncio
async def test_extension_into_next_booking_is_rejected(service, seed, repository):
    booking = await seed("Alice", "U1", jan(1), 3)  # [Jan 1, Jan 4)
    await seed("Carol", "U1", jan(6), 2)            # [Jan 6, Jan 8)

    outcome = await service.extend_booking(booking.id, 3)  # would be [Jan 1, Jan 7)

    assert_rejected(outcome, RejectionKind.EXTENSION_CONFLICT)
    stored = await repository.find_by_id(booking.id)
    assert stored.number_of_nights == 3
    assert stored.check_out_date == jan(4)


@pytest.mark.asyncio
async def test_extension_up_to_next_check_in_is_accepted(service, seed):
    booking = await seed("Alice", "U1", jan(1), 3)
    await seed("Carol", "U1", jan(6), 2)

    outcome = await service.extend_booking(booking.id, 2)  # [Jan 1, Jan 6) touches Jan 6

    assert isinstance(outcome, Accepted)
    assert outcome.booking.check_out_date == jan(6)


@pytest.mark.asyncio
async def test_earlier_booking_does_not_block_extension(service, seed):
    await seed("Carol", "U1", jan(1), 3)             # [Jan 1, Jan 4)
    booking = await seed("Alice", "U1", jan(4), 2)   # [Jan 4, Jan 6)

    outcome = await service.extend_booking(booking.id, 10)

    assert isinstance(outcome, Accepted)
    assert outcome.booking.check_out_date == jan(16)


@pytest.mark.asyncio
async def test_zero_night_extension_is_a_no_op(service, seed):
    booking = await seed("Alice", "U1", jan(1), 3)
    outcome = await service.extend_booking(booking.id, 0)

    assert isinstance(outcome, Accepted)
    assert outcome.booking.number_of_nights == 3
    assert outcome.booking.check_out_date == jan(4)


@pytest.mark.asyncio
async def test_extension_of_unknown_booking(service):
    outcome = await service.extend_booking(4242, 1)
    assert_rejected(outcome, RejectionKind.BOOKING_NOT_FOUND)


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", [0, -5])
async def test_extension_of_non_positive_id_is_not_found(service, seed, booking_id):
    await seed("Alice", "U1", jan(1), 3)
    outcome = await service.extend_booking(booking_id, 1)
    assert_rejected(outcome, RejectionKind.BOOKING_NOT_FOUND)


@pytest.mark.asyncio
async def test_extension_ignores_past_date_rule(repository, unit_lock, seed):
    booking = await seed("Alice", "U1", jan(1), 3)
    service = BookingService(repository, FixedClock(jan(3)), unit_lock)

    outcome = await service.extend_booking(booking.id, 1)
    assert isinstance(outcome, Accepted)


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id, nights", [(1, -1), ("1", 1), (1, 1.5)])
async def test_malformed_extensions_raise(service, seed, booking_id, nights):
    await seed("Alice", "U1", jan(1), 3)
    with pytest.raises(InvalidBookingInput):
        await service.extend_booking(booking_id, nights)


@pytest.mark.asyncio
async def test_extension_retries_after_lost_version_check(clock, unit_lock, seed, repository):
    booking = await seed("Alice", "U1", jan(1), 3)

    class FlakyRepository(InMemoryBookingRepository):
        failures = 1

        async def update(self, booking_id, fields, expected_version):
            if FlakyRepository.failures:
                FlakyRepository.failures -= 1
                return False
            return await super().update(booking_id, fields, expected_version)

    flaky = FlakyRepository()
    flaky._rows = repository._rows
    service = BookingService(flaky, clock, unit_lock)

    outcome = await service.extend_booking(booking.id, 1)

    assert isinstance(outcome, Accepted)
    assert outcome.booking.check_out_date == jan(5)


@pytest.mark.asyncio
async def test_extension_gives_up_after_repeated_version_conflicts(clock, unit_lock):
    class AlwaysStaleRepository(InMemoryBookingRepository):
        update_calls = 0

        async def update(self, booking_id, fields, expected_version):
            AlwaysStaleRepository.update_calls += 1
            return False

    repository = AlwaysStaleRepository()
    booking = await repository.create(Booking.new("Alice", "U1", jan(1), 3))
    service = BookingService(repository, clock, unit_lock)

    outcome = await service.extend_booking(booking.id, 1)

    assert_rejected(outcome, RejectionKind.EXTENSION_CONFLICT)
    assert AlwaysStaleRepository.update_calls == MAX_RETRY_ATTEMPTS
    stored = await repository.find_by_id(booking.id)
    assert stored.number_of_nights == 3


# --- availability checker ----------------------------------------------------


@pytest.mark.asyncio
async def test_availability_checker_reports_first_conflict(repository, seed):
    await seed("Alice", "U1", jan(1), 3)
    later = await seed("Bob", "U1", jan(10), 3)
    checker = AvailabilityChecker(repository)

    conflict = await checker.find_conflict("U1", StayInterval(jan(8), jan(11)))
    assert conflict.id == later.id
    assert await checker.is_available("U1", StayInterval(jan(4), jan(10)))
    assert await checker.is_available("U2", StayInterval(jan(1), jan(30)))


@pytest.mark.asyncio
async def test_availability_checker_excludes_given_booking(repository, seed):
    booking = await seed("Alice", "U1", jan(1), 3)
    checker = AvailabilityChecker(repository)

    assert not await checker.is_available("U1", StayInterval(jan(1), jan(6)))
    assert await checker.is_available("U1", StayInterval(jan(1), jan(6)), exclude_booking_id=booking.id)


# --- calendar limits ---------------------------------------------------------


@pytest.mark.asyncio
async def test_stay_ending_after_year_9999_is_invalid(service, repository):
    with pytest.raises(InvalidBookingInput) as exc_info:
        await service.propose_new_booking("Alice", "U1", date(9999, 12, 31), 1)

    assert exc_info.value.field == "number_of_nights"
    assert repository.all() == []


@pytest.mark.asyncio
async def test_last_representable_night_is_bookable(service):
    outcome = await service.propose_new_booking("Alice", "U1", date(9999, 12, 30), 1)

    assert isinstance(outcome, Accepted)
    assert outcome.booking.check_out_date == date(9999, 12, 31)


@pytest.mark.asyncio
async def test_extension_past_year_9999_is_invalid_and_unapplied(service, seed, repository, unit_lock):
    booking = await seed("Alice", "U1", date(9999, 12, 1), 3)

    with pytest.raises(InvalidBookingInput):
        await service.extend_booking(booking.id, 365)

    stored = await repository.find_by_id(booking.id)
    assert stored.number_of_nights == 3
    assert stored.version == booking.version
    assert unit_lock.active_units() == 0


@pytest.mark.asyncio
async def test_long_stays_are_not_capped(service):
    outcome = await service.propose_new_booking("Alice", "U1", jan(1), 400)
    assert isinstance(outcome, Accepted)

    extended = await service.extend_booking(outcome.booking.id, 400)
    assert isinstance(extended, Accepted)
    assert extended.booking.number_of_nights == 800
