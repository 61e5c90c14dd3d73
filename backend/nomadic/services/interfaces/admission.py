"""
Tent hold strategy interface.
Decides whether a booking that passed the admission rule may be written.
"""

from abc import ABC, abstractmethod
from datetime import date


class AdmissionStrategy(ABC):
    """
    Interface for tent hold strategies.

    Implementations:
    - OptimisticAdmission: no hold, plain read-then-write
    - RedisAdmission: one expiring hold per booking, capped per date
    """

    @abstractmethod
    async def admit(self, booking_date: date, booking_id: int, tents: int, paid_tents: int) -> bool:
        """
        Try to hold `tents` for `booking_date` on behalf of one booking.

        Args:
            booking_date: Date being booked
            booking_id: Booking the hold belongs to
            tents: Tents requested by this submission
            paid_tents: Tents already taken by paid bookings for the date

        Returns:
            True if the booking may be persisted
            False if live holds already use up the remaining capacity
        """
        pass

    @abstractmethod
    async def release(self, booking_date: date, booking_id: int):
        """
        Drop this booking's hold (booking paid, or the write failed).
        Other bookings' holds are never touched.
        """
        pass
