"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from nomadic.api.routes import availability, bookings, payments, settings, stats

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings.router)
api_router.include_router(availability.router)
api_router.include_router(settings.router)
api_router.include_router(stats.router)
api_router.include_router(payments.router)
