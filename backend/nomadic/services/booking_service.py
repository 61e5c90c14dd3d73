"""
Booking service: the admission rule and booking queries.

ADMISSION RULE
==============

A submission is checked in a fixed order and the first failure wins:

  1. required fields present (children may be 0)
  2. 1 <= tents <= 5
  3. Wadi needs at least 2 tents
  4. phone carries the +971 country code
  5. date is at least 2 days after today (business timezone)
  6. at most 4 guests per tent
  7. the date still has room for the tents (paid bookings only)
  8. the date is not locked to a different location

Every failure is a 400 raised before anything is committed. On success the
booking is priced with the current settings and flushed for its id, a tent
hold is requested for that id, and the booking row plus the date lock row
are committed together before the response is built. A refused hold rolls
the flushed row back; a failed commit releases the hold.

The check-then-write sequence is not atomic by itself. With the default
OptimisticAdmission two concurrent submissions can both pass step 7;
RedisAdmission closes that gap with an atomic per-date hold.
"""

import math
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nomadic.models.booking import Booking, WADI
from nomadic.schemas.booking import BookingCreate
from nomadic.services.availability_service import get_availability, upsert_date_lock
from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.services.pricing import PriceBreakdown, calculate_booking_price, select_custom_add_ons
from nomadic.services.settings_service import load_pricing_config
from nomadic.core.config import get_settings
from nomadic.core.logging import get_logger
from nomadic.core.metrics import record_admission, record_booking_attempt, record_rejection

logger = get_logger(__name__)


def business_today() -> date:
    return datetime.now(ZoneInfo(get_settings().BUSINESS_TIMEZONE)).date()


def _reject(reason: str, detail: str, **context) -> HTTPException:
    logger.warning("booking_rejected", reason=reason, **context)
    record_rejection(reason)
    record_booking_attempt("rejected")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _plural_tents(count: int) -> str:
    return f"{count} tent{'' if count == 1 else 's'}"


def _has_required_fields(data: BookingCreate) -> bool:
    return bool(
        data.customer_name
        and data.customer_email
        and data.customer_phone
        and data.booking_date
        and data.location
        and data.number_of_tents
        and data.adults
        and data.children is not None
        and data.sleeping_arrangements
    )


def validate_submission(data: BookingCreate, today: date) -> None:
    """Steps 1-6: checks that need no database access."""
    settings = get_settings()

    if not _has_required_fields(data):
        raise _reject("missing_fields", "Missing required fields")

    tents = data.number_of_tents
    if tents < settings.MIN_TENTS_PER_BOOKING or tents > settings.MAX_TENTS_PER_BOOKING:
        raise _reject(
            "tent_count",
            f"Number of tents must be between {settings.MIN_TENTS_PER_BOOKING} "
            f"and {settings.MAX_TENTS_PER_BOOKING} per booking",
            tents=tents,
        )

    if data.location == WADI and tents < settings.WADI_MIN_TENTS:
        raise _reject(
            "wadi_min_tents",
            f"Wadi location requires at least {settings.WADI_MIN_TENTS} tents",
            tents=tents,
        )

    if not data.customer_phone.startswith(settings.PHONE_COUNTRY_CODE):
        raise _reject("phone_prefix", f"Phone number must start with {settings.PHONE_COUNTRY_CODE}")

    earliest = today + timedelta(days=settings.MIN_ADVANCE_BOOKING_DAYS)
    if data.booking_date < earliest:
        raise _reject(
            "advance_notice",
            f"Booking date must be at least {settings.MIN_ADVANCE_BOOKING_DAYS} days from today",
            booking_date=data.booking_date.isoformat(),
        )

    if data.adults + data.children > tents * settings.MAX_GUESTS_PER_TENT:
        raise _reject(
            "too_many_guests",
            f"A maximum of {settings.MAX_GUESTS_PER_TENT} guests per tent is allowed",
            tents=tents,
            guests=data.adults + data.children,
        )


def capacity_message(remaining: int) -> str:
    cap = get_settings().MAX_TENTS_PER_DATE
    if remaining <= 0:
        return f"This date is fully booked ({cap} tents maximum per day)"
    return f"Only {_plural_tents(remaining)} available for this date ({cap} tents maximum per day)"


def _has_children(data: BookingCreate) -> bool:
    if data.has_children is not None:
        return data.has_children
    return data.children > 0


async def price_submission(db: AsyncSession, data: BookingCreate) -> PriceBreakdown:
    config = await load_pricing_config(db)
    return calculate_booking_price(
        number_of_tents=data.number_of_tents,
        location=data.location,
        add_ons=data.add_ons.model_dump(),
        has_children=_has_children(data),
        custom_add_ons=select_custom_add_ons(config.custom_add_ons, data.selected_custom_add_ons),
        config=config,
        booking_date=data.booking_date,
    )


async def create_booking(
    db: AsyncSession,
    data: BookingCreate,
    admission: AdmissionStrategy,
    today: Optional[date] = None,
) -> tuple[Booking, PriceBreakdown]:
    validate_submission(data, today or business_today())

    availability = await get_availability(db, data.booking_date)

    if availability.remaining_capacity < data.number_of_tents:
        raise _reject(
            "capacity",
            capacity_message(availability.remaining_capacity),
            booking_date=data.booking_date.isoformat(),
            requested=data.number_of_tents,
            remaining=availability.remaining_capacity,
        )

    if availability.is_locked and data.location != availability.locked_location:
        raise _reject(
            "location_locked",
            f"This date is already booked for {availability.locked_location} location. "
            "All bookings for the same date must be in the same location.",
            booking_date=data.booking_date.isoformat(),
            requested=data.location,
            locked=availability.locked_location,
        )

    pricing = await price_submission(db, data)

    booking = Booking(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        booking_date=data.booking_date,
        location=data.location,
        number_of_tents=data.number_of_tents,
        adults=data.adults,
        children=data.children,
        has_children=_has_children(data),
        sleeping_arrangements=[arrangement.model_dump() for arrangement in data.sleeping_arrangements],
        add_ons=data.add_ons.model_dump(),
        selected_custom_add_ons=list(data.selected_custom_add_ons),
        notes=data.notes,
        is_paid=False,
        **pricing.as_dict(),
    )
    db.add(booking)
    # The id names this booking's tent hold; nothing is committed yet
    await db.flush()
    booking_id = booking.id

    admitted = await admission.admit(
        data.booking_date, booking_id, data.number_of_tents, availability.total_tents
    )
    record_admission(admitted)
    if not admitted:
        await db.rollback()
        raise _reject(
            "hold_unavailable",
            "Another booking for this date is being completed. Please try again in a few minutes.",
            booking_date=data.booking_date.isoformat(),
            requested=data.number_of_tents,
        )

    try:
        await upsert_date_lock(
            db,
            data.booking_date,
            availability.locked_location or data.location,
            availability.total_tents + data.number_of_tents,
        )
        await db.commit()
    except Exception:
        await admission.release(data.booking_date, booking_id)
        record_booking_attempt("error")
        raise

    logger.info(
        "booking_created",
        booking_id=booking_id,
        booking_date=data.booking_date.isoformat(),
        location=data.location,
        tents=data.number_of_tents,
        total=str(pricing.total),
    )
    record_booking_attempt("created")
    return booking, pricing


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found",
        )
    return booking


async def get_booking_by_session(db: AsyncSession, session_id: str) -> Booking:
    result = await db.execute(select(Booking).where(Booking.stripe_session_id == session_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found for this checkout session",
        )
    return booking


async def list_bookings(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    location: Optional[str] = None,
    is_paid: Optional[bool] = True,
) -> tuple[list[Booking], int, int]:
    """
    Page through bookings, newest first.
    Paid bookings only unless is_paid is given explicitly (None means all).
    Returns (bookings, total, pages).
    """
    query = select(Booking)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Booking.customer_name.ilike(pattern),
                Booking.customer_email.ilike(pattern),
                Booking.customer_phone.ilike(pattern),
            )
        )
    if location:
        query = query.where(Booking.location == location)
    if is_paid is not None:
        query = query.where(Booking.is_paid.is_(is_paid))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    result = await db.execute(
        query
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    bookings = list(result.scalars().all())

    return bookings, total, math.ceil(total / limit) if limit else 0
