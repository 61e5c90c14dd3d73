"""
Optimistic tent hold strategy - no hold at all.
The admission rule's capacity check against paid bookings is the only gate.
"""

from datetime import date

from nomadic.services.interfaces.admission import AdmissionStrategy


class OptimisticAdmission(AdmissionStrategy):
    """
    Always admit.

    Two simultaneous submissions for the same date can both pass the
    capacity check; payment decides which of them end up counted.
    """

    async def admit(self, booking_date: date, booking_id: int, tents: int, paid_tents: int) -> bool:
        return True

    async def release(self, booking_date: date, booking_id: int):
        pass
