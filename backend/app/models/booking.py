"""
Booking model representing a guest's stay in a rentable unit.

Key design decisions:
- check_out_date is stored, not computed in SQL, and is always rewritten
  together with number_of_nights (see Booking.apply_nights)
- No unique or exclusion constraint on dates: overlap is decided by the
  booking engine under a per-unit lock, not by the storage layer
- `version` column enables optimistic locking for concurrent extensions
"""

from datetime import date, timedelta

from sqlalchemy import Column, Integer, String, Date, Index, CheckConstraint

from app.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    guest_name = Column(String(255), nullable=False, index=True)
    unit_id = Column(String(100), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False)
    number_of_nights = Column(Integer, nullable=False)
    check_out_date = Column(Date, nullable=False)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("number_of_nights > 0", name="check_booking_nights_positive"),
        CheckConstraint("check_out_date > check_in_date", name="check_booking_checkout_after_checkin"),
        # Availability scans are always "all bookings of one unit"
        Index("ix_bookings_unit_check_in", "unit_id", "check_in_date"),
    )

    def apply_nights(self, number_of_nights: int) -> None:
        """Set the night count and recompute the checkout date from it."""
        self.number_of_nights = number_of_nights
        self.check_out_date = self.check_in_date + timedelta(days=number_of_nights)

    @classmethod
    def new(cls, guest_name: str, unit_id: str, check_in_date: date, number_of_nights: int) -> "Booking":
        booking = cls(guest_name=guest_name, unit_id=unit_id, check_in_date=check_in_date, version=1)
        booking.apply_nights(number_of_nights)
        return booking

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, guest={self.guest_name}, unit={self.unit_id}, "
            f"{self.check_in_date}..{self.check_out_date})>"
        )
