"""
Pricing settings endpoints for the admin panel.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.db.session import get_db
from nomadic.schemas.settings import (
    PricingSettingsResponse,
    PricingSettingsUpdate,
    PricingSettingsUpdateResponse,
)
from nomadic.services.settings_service import get_or_create_settings, to_response, update_settings

router = APIRouter(prefix="/settings", tags=["Settings"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("", response_model=PricingSettingsResponse)
async def read_settings(response: Response, db: AsyncSession = Depends(get_db)):
    """Current prices. Created with defaults on first access."""
    response.headers.update(NO_CACHE_HEADERS)
    settings = await get_or_create_settings(db)
    return to_response(settings)


@router.patch("", response_model=PricingSettingsUpdateResponse)
async def patch_settings(
    updates: PricingSettingsUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Merge a partial update; a custom_add_ons list replaces the stored one."""
    response.headers.update(NO_CACHE_HEADERS)
    settings = await update_settings(db, updates)
    return PricingSettingsUpdateResponse(settings=to_response(settings))
