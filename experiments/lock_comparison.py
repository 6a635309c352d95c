#!/usr/bin/env python3
"""
In-process comparison: booking engine with and without per-unit locking.
No server or database needed; runs against the in-memory repository.

  python experiments/lock_comparison.py   (after `pip install -e .`)
"""

import asyncio
import statistics
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List

from app.core.clock import FixedClock
from app.domain.outcomes import Accepted
from app.repositories.memory_repository import InMemoryBookingRepository
from app.services.booking_service import BookingService
from app.services.interfaces.local_unit_lock import LocalUnitLock
from app.services.interfaces.unit_lock import UnitLock

TODAY = date(2030, 1, 1)


class NoLock(UnitLock):
    name = "none"

    async def acquire(self, key):
        return None

    async def release(self, key, token):
        pass


@dataclass
class Metrics:
    accepted: int = 0
    rejected: int = 0
    response_times: List[float] = field(default_factory=list)

    def percentile(self, p: float) -> float:
        if not self.response_times:
            return 0
        ordered = sorted(self.response_times)
        return ordered[min(int(len(ordered) * p), len(ordered) - 1)]


def overlapping_pairs(bookings) -> int:
    pairs = 0
    for i, a in enumerate(bookings):
        for b in bookings[i + 1:]:
            if a.unit_id == b.unit_id and a.check_in_date < b.check_out_date and b.check_in_date < a.check_out_date:
                pairs += 1
    return pairs


async def run(lock: UnitLock, guests: int, units: int):
    repository = InMemoryBookingRepository()
    service = BookingService(repository, FixedClock(TODAY), lock)
    metrics = Metrics()

    async def propose(i: int):
        start = time.perf_counter()
        outcome = await service.propose_new_booking(
            f"guest-{i}", f"unit-{i % units}", TODAY + timedelta(days=i % 7), 3
        )
        metrics.response_times.append((time.perf_counter() - start) * 1000)
        if isinstance(outcome, Accepted):
            metrics.accepted += 1
        else:
            metrics.rejected += 1

    start = time.perf_counter()
    await asyncio.gather(*[propose(i) for i in range(guests)])
    duration = time.perf_counter() - start
    return metrics, duration, overlapping_pairs(repository.all())


def print_result(name: str, metrics: Metrics, duration: float, overlaps: int):
    print(f"{name}:")
    print(f"  Duration:        {duration:.3f}s")
    print(f"  Accepted:        {metrics.accepted}")
    print(f"  Rejected:        {metrics.rejected}")
    print(f"  Overlaps stored: {overlaps} {'✓' if overlaps == 0 else '✗ DOUBLE BOOKED'}")
    if metrics.response_times:
        print(f"  Avg latency:     {statistics.mean(metrics.response_times):.2f}ms")
        print(f"  P99 latency:     {metrics.percentile(0.99):.2f}ms")
    print()


async def main():
    for guests, units in [(100, 1), (1000, 10), (1000, 100)]:
        print(f"\n{'='*60}\n{guests} guests / {units} units\n{'='*60}\n")
        print_result("No lock", *await run(NoLock(), guests, units))
        print_result("LocalUnitLock", *await run(LocalUnitLock(timeout=30), guests, units))


if __name__ == "__main__":
    asyncio.run(main())
