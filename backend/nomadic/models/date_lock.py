"""
Per-date location lock.

A cached view over paid bookings: which single location a calendar date is
committed to, and how many tents are reserved. Written in the same
transaction as the booking that changes it; availability checks always
derive from the bookings themselves, so a drifted row is repaired by
recomputing it.
"""

from sqlalchemy import CheckConstraint, Column, Date, Integer, String

from nomadic.db.base import Base, TimestampMixin


class DateLocationLock(Base, TimestampMixin):
    __tablename__ = "date_location_locks"

    date = Column(Date, primary_key=True)
    locked_location = Column(String(20), nullable=False)
    total_tents = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("total_tents >= 0", name="check_lock_total_tents_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<DateLocationLock(date={self.date}, location={self.locked_location}, tents={self.total_tents})>"
