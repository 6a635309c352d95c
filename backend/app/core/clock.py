"""
Clock abstraction for "today".

Use cases receive a Clock and sample it once per invocation, so the past
check-in rule sees one consistent date for the whole check.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import get_settings


class Clock(ABC):
    @abstractmethod
    def today(self) -> date:
        """Current calendar date used as the reference for past-date checks."""
        pass


class SystemClock(Clock):
    """Wall clock in the configured booking timezone."""

    def __init__(self, tz_name: Optional[str] = None):
        self.tz = ZoneInfo(tz_name or get_settings().BOOKING_TIMEZONE)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """Always returns the same date. Used by tests and load experiments."""

    def __init__(self, fixed: date):
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed
