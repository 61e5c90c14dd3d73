"""
Pricing settings service: the admin-editable singleton row.

The row is created with defaults on first read. Pricing code never reads
the row directly; it asks for a PricingConfig snapshot per computation.
"""

import time
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.models.pricing_settings import DEFAULT_PRICING, SETTINGS_ROW_ID, PricingSettings
from nomadic.schemas.settings import PricingSettingsResponse, PricingSettingsUpdate
from nomadic.services.pricing import CustomAddOn, PricingConfig, to_decimal
from nomadic.core.logging import get_logger

logger = get_logger(__name__)

# request field -> column, per nested group
_TENT_PRICE_COLUMNS = {
    "weekday": "weekday_price",
    "weekend": "weekend_price",
    "multiple_tents": "multiple_tents_price",
}
_ADD_ON_PRICE_COLUMNS = {
    "charcoal": "charcoal_price",
    "firewood": "firewood_price",
    "portable_toilet": "portable_toilet_price",
}


async def get_or_create_settings(db: AsyncSession) -> PricingSettings:
    settings = await db.get(PricingSettings, SETTINGS_ROW_ID)
    if settings is None:
        settings = PricingSettings(id=SETTINGS_ROW_ID, custom_add_ons=[], **DEFAULT_PRICING)
        db.add(settings)
        await db.commit()
        logger.info("pricing_settings_created")
    return settings


def _generate_add_on_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid4().hex[:6]}"


def normalize_custom_add_on(entry: dict[str, Any]) -> dict[str, Any]:
    """Fill id/name/price/description defaults; non-numeric prices become 0."""
    price = to_decimal(entry.get("price"))
    return {
        "id": str(entry.get("id") or _generate_add_on_id()),
        "name": str(entry.get("name") or ""),
        "price": float(price),
        "description": str(entry.get("description") or ""),
    }


def to_pricing_config(settings: PricingSettings) -> PricingConfig:
    return PricingConfig(
        weekday_price=to_decimal(settings.weekday_price, DEFAULT_PRICING["weekday_price"]),
        weekend_price=to_decimal(settings.weekend_price, DEFAULT_PRICING["weekend_price"]),
        multiple_tents_price=to_decimal(settings.multiple_tents_price, DEFAULT_PRICING["multiple_tents_price"]),
        charcoal_price=to_decimal(settings.charcoal_price, DEFAULT_PRICING["charcoal_price"]),
        firewood_price=to_decimal(settings.firewood_price, DEFAULT_PRICING["firewood_price"]),
        portable_toilet_price=to_decimal(settings.portable_toilet_price, DEFAULT_PRICING["portable_toilet_price"]),
        wadi_surcharge=to_decimal(settings.wadi_surcharge, DEFAULT_PRICING["wadi_surcharge"]),
        vat_rate=to_decimal(settings.vat_rate, DEFAULT_PRICING["vat_rate"]),
        custom_add_ons=tuple(
            CustomAddOn(
                id=str(entry.get("id")),
                name=entry.get("name") or "",
                price=to_decimal(entry.get("price")),
                description=entry.get("description") or "",
            )
            for entry in (settings.custom_add_ons or [])
            if entry.get("id")
        ),
    )


async def load_pricing_config(db: AsyncSession) -> PricingConfig:
    """Fresh snapshot of the current prices; read on every pricing computation."""
    return to_pricing_config(await get_or_create_settings(db))


def to_response(settings: PricingSettings) -> PricingSettingsResponse:
    return PricingSettingsResponse(
        tent_prices={
            field: float(getattr(settings, column)) for field, column in _TENT_PRICE_COLUMNS.items()
        },
        add_on_prices={
            field: float(getattr(settings, column)) for field, column in _ADD_ON_PRICE_COLUMNS.items()
        },
        wadi_surcharge=float(settings.wadi_surcharge),
        vat_rate=float(settings.vat_rate),
        custom_add_ons=settings.custom_add_ons or [],
        updated_at=settings.updated_at,
    )


def _apply_group(settings: PricingSettings, values: Optional[dict], columns: dict[str, str]) -> list[str]:
    changed = []
    for field, value in (values or {}).items():
        if value is None or field not in columns:
            continue
        setattr(settings, columns[field], to_decimal(value))
        changed.append(columns[field])
    return changed


async def update_settings(db: AsyncSession, updates: PricingSettingsUpdate) -> PricingSettings:
    """
    Merge a partial update into the singleton.
    Omitted fields keep their values; a custom_add_ons list replaces the stored one.
    """
    settings = await get_or_create_settings(db)
    payload = updates.model_dump(exclude_unset=True)

    changed = []
    changed += _apply_group(settings, payload.get("tent_prices"), _TENT_PRICE_COLUMNS)
    changed += _apply_group(settings, payload.get("add_on_prices"), _ADD_ON_PRICE_COLUMNS)
    for column in ("wadi_surcharge", "vat_rate"):
        if payload.get(column) is not None:
            setattr(settings, column, to_decimal(payload[column]))
            changed.append(column)

    if payload.get("custom_add_ons") is not None:
        settings.custom_add_ons = [normalize_custom_add_on(entry) for entry in payload["custom_add_ons"]]
        changed.append("custom_add_ons")

    await db.commit()
    logger.info("pricing_settings_updated", fields=changed)
    return settings
