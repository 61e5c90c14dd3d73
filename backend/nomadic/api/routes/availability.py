"""
Date constraint endpoints: what can still be booked on a date, and lock repair.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.db.session import get_db
from nomadic.schemas.availability import (
    DateConstraintsResponse,
    DateConstraintsUpdate,
    DateConstraintsUpdateResponse,
)
from nomadic.services.availability_service import get_availability, repair_date_lock
from nomadic.core.config import get_settings

router = APIRouter(prefix="/date-constraints", tags=["Availability"])


@router.get("", response_model=DateConstraintsResponse)
async def get_date_constraints(
    booking_date: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Locked location, reserved tents and remaining capacity for a date (paid bookings only)."""
    if booking_date is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date parameter is required",
        )

    availability = await get_availability(db, booking_date)
    return DateConstraintsResponse(
        locked_location=availability.locked_location,
        total_tents=availability.total_tents,
        remaining_capacity=availability.remaining_capacity,
        available_locations=list(availability.available_locations),
    )


@router.post("", response_model=DateConstraintsUpdateResponse)
async def update_date_constraints(
    payload: DateConstraintsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Recompute the stored lock for a date from its paid bookings.
    A repair operation: repeating it leaves the same row.
    """
    if not payload.date or not payload.location or not payload.tents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date, location, and tents are required",
        )

    lock = await repair_date_lock(db, payload.date, payload.location)
    return DateConstraintsUpdateResponse(
        locked_location=lock.locked_location,
        total_tents=lock.total_tents,
        remaining_capacity=get_settings().MAX_TENTS_PER_DATE - lock.total_tents,
    )
