"""
Booking persistence behind a small interface.
The booking engine only ever reads matching records and writes one record.
"""

from .booking_repository import BookingRepository
from .sqlalchemy_repository import SqlAlchemyBookingRepository
from .memory_repository import InMemoryBookingRepository

__all__ = ['BookingRepository', 'SqlAlchemyBookingRepository', 'InMemoryBookingRepository']
