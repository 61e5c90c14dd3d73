"""
Pydantic schemas for the pricing settings admin API.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TentPrices(BaseModel):
    weekday: float
    weekend: float
    multiple_tents: float


class AddOnPrices(BaseModel):
    charcoal: float
    firewood: float
    portable_toilet: float


class CustomAddOnEntry(BaseModel):
    id: str
    name: str = ""
    price: float = 0
    description: str = ""


class PricingSettingsResponse(BaseModel):
    tent_prices: TentPrices
    add_on_prices: AddOnPrices
    wadi_surcharge: float
    vat_rate: float
    custom_add_ons: list[CustomAddOnEntry]
    updated_at: Optional[datetime] = None


class TentPricesUpdate(BaseModel):
    weekday: Optional[float] = Field(None, ge=0)
    weekend: Optional[float] = Field(None, ge=0)
    multiple_tents: Optional[float] = Field(None, ge=0)


class AddOnPricesUpdate(BaseModel):
    charcoal: Optional[float] = Field(None, ge=0)
    firewood: Optional[float] = Field(None, ge=0)
    portable_toilet: Optional[float] = Field(None, ge=0)


class PricingSettingsUpdate(BaseModel):
    tent_prices: Optional[TentPricesUpdate] = None
    add_on_prices: Optional[AddOnPricesUpdate] = None
    wadi_surcharge: Optional[float] = Field(None, ge=0)
    vat_rate: Optional[float] = Field(None, ge=0, le=1)
    # Raw entries: normalized (id/name/price/description defaults) by the settings service
    custom_add_ons: Optional[list[dict[str, Any]]] = None


class PricingSettingsUpdateResponse(BaseModel):
    success: bool = True
    settings: PricingSettingsResponse
