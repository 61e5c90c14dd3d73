"""
Dashboard statistics endpoints. Always computed from current bookings.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.db.session import get_db
from nomadic.schemas.stats import BookingStats, ChartsResponse
from nomadic.services.stats_service import get_charts, get_stats
from nomadic.api.routes.settings import NO_CACHE_HEADERS

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=BookingStats)
async def stats_endpoint(response: Response, db: AsyncSession = Depends(get_db)):
    response.headers.update(NO_CACHE_HEADERS)
    return await get_stats(db)


@router.get("/charts", response_model=ChartsResponse)
async def charts_endpoint(response: Response, db: AsyncSession = Depends(get_db)):
    """Monthly and per-location bookings and revenue (paid only)."""
    response.headers.update(NO_CACHE_HEADERS)
    return await get_charts(db)
