"""
Date availability: which location a date is locked to and how many tents remain.

Only paid bookings count. The first paid booking for a date (oldest first)
decides the locked location; every later paid booking for that date must
agree, otherwise an earlier admission went wrong and we surface a 500.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nomadic.models.booking import Booking, LOCATIONS
from nomadic.models.date_lock import DateLocationLock
from nomadic.core.config import get_settings
from nomadic.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DateAvailability:
    booking_date: date
    locked_location: Optional[str]
    total_tents: int
    remaining_capacity: int
    available_locations: tuple

    @property
    def is_locked(self) -> bool:
        return self.locked_location is not None


async def get_paid_bookings_for_date(db: AsyncSession, booking_date: date) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .where(Booking.booking_date == booking_date, Booking.is_paid.is_(True))
        .order_by(Booking.created_at.asc(), Booking.id.asc())
    )
    return list(result.scalars().all())


async def get_availability(db: AsyncSession, booking_date: date) -> DateAvailability:
    capacity = get_settings().MAX_TENTS_PER_DATE
    paid = await get_paid_bookings_for_date(db, booking_date)

    if not paid:
        return DateAvailability(
            booking_date=booking_date,
            locked_location=None,
            total_tents=0,
            remaining_capacity=capacity,
            available_locations=LOCATIONS,
        )

    locked_location = paid[0].location
    if any(booking.location != locked_location for booking in paid):
        logger.error(
            "date_location_inconsistent",
            booking_date=booking_date.isoformat(),
            locations=sorted({booking.location for booking in paid}),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error: Inconsistent location data for this date",
        )

    total_tents = sum(booking.number_of_tents for booking in paid)
    return DateAvailability(
        booking_date=booking_date,
        locked_location=locked_location,
        total_tents=total_tents,
        remaining_capacity=capacity - total_tents,
        available_locations=(locked_location,),
    )


async def upsert_date_lock(
    db: AsyncSession,
    booking_date: date,
    locked_location: str,
    total_tents: int,
) -> DateLocationLock:
    lock = await db.get(DateLocationLock, booking_date)
    if lock is None:
        lock = DateLocationLock(date=booking_date, locked_location=locked_location, total_tents=total_tents)
        db.add(lock)
    else:
        lock.locked_location = locked_location
        lock.total_tents = total_tents
    await db.flush()
    return lock


async def rebuild_date_lock(db: AsyncSession, booking_date: date, requested_location: str) -> DateLocationLock:
    """
    Recompute the lock row from paid bookings.

    Locked location is the first paid booking's, or the requested one when
    the date has no paid bookings yet. Running it twice stores the same row.
    """
    paid = await get_paid_bookings_for_date(db, booking_date)
    locked_location = paid[0].location if paid else requested_location
    total_tents = sum(booking.number_of_tents for booking in paid)

    lock = await upsert_date_lock(db, booking_date, locked_location, total_tents)
    logger.info(
        "date_lock_rebuilt",
        booking_date=booking_date.isoformat(),
        locked_location=locked_location,
        total_tents=total_tents,
    )
    return lock


async def repair_date_lock(db: AsyncSession, booking_date: date, requested_location: str) -> DateLocationLock:
    """Rebuild the lock row and commit it."""
    lock = await rebuild_date_lock(db, booking_date, requested_location)
    await db.commit()
    return lock
