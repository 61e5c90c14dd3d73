"""
Dashboard statistics, summed from bookings on every call.
"""

from collections import OrderedDict
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.models.booking import Booking
from nomadic.schemas.stats import BookingStats, ChartsResponse, LocationRollup, MonthlyRollup
from nomadic.services.pricing import to_decimal


async def get_stats(db: AsyncSession) -> BookingStats:
    result = await db.execute(
        select(
            func.count(case((Booking.is_paid.is_(True), 1))),
            func.coalesce(func.sum(case((Booking.is_paid.is_(True), Booking.total))), 0),
            func.count(case((Booking.is_paid.is_(False), 1))),
        )
    )
    paid, revenue, pending = result.one()
    return BookingStats(
        total_bookings=paid,
        paid_bookings=paid,
        total_revenue=float(revenue or 0),
        pending_bookings=pending,
    )


def month_label(booking: Booking) -> str:
    # "Oct 2026"
    return booking.booking_date.strftime("%b %Y")


async def get_charts(db: AsyncSession) -> ChartsResponse:
    """Monthly and per-location rollups over paid bookings, in booking-date order."""
    result = await db.execute(
        select(Booking)
        .where(Booking.is_paid.is_(True))
        .order_by(Booking.booking_date.asc(), Booking.id.asc())
    )
    bookings = list(result.scalars().all())

    monthly: "OrderedDict[str, list]" = OrderedDict()
    by_location: "OrderedDict[str, list]" = OrderedDict()
    revenue = Decimal("0")

    for booking in bookings:
        total = to_decimal(booking.total)
        revenue += total
        for bucket, key in ((monthly, month_label(booking)), (by_location, booking.location)):
            entry = bucket.setdefault(key, [0, Decimal("0")])
            entry[0] += 1
            entry[1] += total

    return ChartsResponse(
        monthly_bookings=[
            MonthlyRollup(month=month, bookings=count, revenue=float(amount))
            for month, (count, amount) in monthly.items()
        ],
        location_stats=[
            LocationRollup(location=location, bookings=count, revenue=float(amount))
            for location, (count, amount) in by_location.items()
        ],
        stats=BookingStats(
            total_bookings=len(bookings),
            paid_bookings=len(bookings),
            total_revenue=float(revenue),
            pending_bookings=0,
        ),
    )
