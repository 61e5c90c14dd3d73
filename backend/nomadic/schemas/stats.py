"""
Pydantic schemas for dashboard statistics.
"""

from pydantic import BaseModel


class BookingStats(BaseModel):
    total_bookings: int
    paid_bookings: int
    total_revenue: float
    pending_bookings: int


class MonthlyRollup(BaseModel):
    month: str
    bookings: int
    revenue: float


class LocationRollup(BaseModel):
    location: str
    bookings: int
    revenue: float


class ChartsResponse(BaseModel):
    monthly_bookings: list[MonthlyRollup]
    location_stats: list[LocationRollup]
    stats: BookingStats
