"""
Booking endpoints: submission, admin listing and lookups.
"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.db.session import get_db
from nomadic.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingListResponse,
    BookingResponse,
    Pagination,
    PriceBreakdownResponse,
    LocationName,
)
from nomadic.services.booking_service import create_booking, get_booking, get_booking_by_session, list_bookings
from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.services.strategy_factory import get_admission
from nomadic.core.metrics import booking_latency

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
    admission: AdmissionStrategy = Depends(get_admission),
):
    """
    Submit a booking request.

    The booking is stored unpaid with its price breakdown; the client then
    opens a checkout session to pay. Rule violations return 400 with the reason.
    """
    start = time.perf_counter()
    try:
        booking, pricing = await create_booking(db, booking_data, admission)
    finally:
        booking_latency.observe(time.perf_counter() - start)
    return BookingCreatedResponse(
        booking_id=booking.id,
        pricing=PriceBreakdownResponse.from_breakdown(pricing),
    )


@router.get("/", response_model=BookingListResponse)
async def list_bookings_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", max_length=100),
    location: Optional[LocationName] = Query(None),
    is_paid: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """Orders list for the admin panel. Paid bookings unless is_paid=false."""
    bookings, total, pages = await list_bookings(db, page, limit, search, location, is_paid)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        pagination=Pagination(page=page, limit=limit, total=total, pages=pages),
    )


@router.get("/session/{session_id}", response_model=BookingResponse)
async def get_booking_by_session_endpoint(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Booking behind a checkout session; backs the payment success page."""
    return await get_booking_by_session(db, session_id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, booking_id)
