"""
Booking price calculation.

Everything here is pure: the caller loads a PricingConfig (see
settings_service.load_pricing_config) and passes it in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from nomadic.models.booking import WADI
from nomadic.models.pricing_settings import DEFAULT_PRICING

ZERO = Decimal("0")
CENT = Decimal("0.01")

# date.weekday(): Monday == 0
WEEKEND_DAYS = frozenset({4, 5, 6})  # Fri, Sat, Sun


@dataclass(frozen=True)
class CustomAddOn:
    id: str
    name: str
    price: Decimal
    description: str = ""
    selected: bool = False


@dataclass(frozen=True)
class PricingConfig:
    weekday_price: Decimal = DEFAULT_PRICING["weekday_price"]
    weekend_price: Decimal = DEFAULT_PRICING["weekend_price"]
    multiple_tents_price: Decimal = DEFAULT_PRICING["multiple_tents_price"]
    charcoal_price: Decimal = DEFAULT_PRICING["charcoal_price"]
    firewood_price: Decimal = DEFAULT_PRICING["firewood_price"]
    portable_toilet_price: Decimal = DEFAULT_PRICING["portable_toilet_price"]
    wadi_surcharge: Decimal = DEFAULT_PRICING["wadi_surcharge"]
    vat_rate: Decimal = DEFAULT_PRICING["vat_rate"]
    custom_add_ons: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class PriceBreakdown:
    tent_price: Decimal
    location_surcharge: Decimal
    add_ons_cost: Decimal
    custom_add_ons_cost: Decimal
    subtotal: Decimal
    vat: Decimal
    total: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return {
            "tent_price": self.tent_price,
            "location_surcharge": self.location_surcharge,
            "add_ons_cost": self.add_ons_cost,
            "custom_add_ons_cost": self.custom_add_ons_cost,
            "subtotal": self.subtotal,
            "vat": self.vat,
            "total": self.total,
        }


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce JSON/DB numbers to Decimal; floats go through str() to keep 12.5 as 12.5."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except ArithmeticError:
        return default
    return result if result.is_finite() else default


def to_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def tent_price_for(number_of_tents: int, config: PricingConfig, booking_date: Optional[date] = None) -> Decimal:
    # 2+ tents always use the multiple-tents rate, whatever the day
    if number_of_tents >= 2:
        return config.multiple_tents_price * number_of_tents
    if booking_date is None or is_weekend(booking_date):
        return config.weekend_price
    return config.weekday_price


def select_custom_add_ons(
    available: Iterable[CustomAddOn],
    selected_ids: Optional[Iterable[str]],
) -> List[CustomAddOn]:
    """Mark the configured custom add-ons the customer picked. Unknown ids are ignored."""
    wanted = set(selected_ids or ())
    return [
        CustomAddOn(
            id=addon.id,
            name=addon.name,
            price=addon.price,
            description=addon.description,
            selected=addon.id in wanted,
        )
        for addon in available
    ]


def calculate_booking_price(
    number_of_tents: int,
    location: str,
    add_ons: Mapping[str, bool],
    has_children: bool,
    custom_add_ons: Iterable[CustomAddOn] = (),
    config: Optional[PricingConfig] = None,
    booking_date: Optional[date] = None,
) -> PriceBreakdown:
    config = config or PricingConfig()

    tent_price = tent_price_for(number_of_tents, config, booking_date)
    location_surcharge = config.wadi_surcharge if location == WADI else ZERO

    add_ons_cost = ZERO
    if add_ons.get("charcoal"):
        add_ons_cost += config.charcoal_price
    if add_ons.get("firewood"):
        add_ons_cost += config.firewood_price
    # Portable toilet is complimentary for families with children
    if add_ons.get("portable_toilet") and not has_children:
        add_ons_cost += config.portable_toilet_price

    custom_add_ons_cost = sum((addon.price for addon in custom_add_ons if addon.selected), ZERO)

    tent_price = to_money(tent_price)
    location_surcharge = to_money(location_surcharge)
    add_ons_cost = to_money(add_ons_cost)
    custom_add_ons_cost = to_money(custom_add_ons_cost)

    # All amounts in whole fils
    subtotal = tent_price + location_surcharge + add_ons_cost + custom_add_ons_cost
    vat = to_money(subtotal * config.vat_rate)
    total = subtotal + vat

    return PriceBreakdown(
        tent_price=tent_price,
        location_surcharge=location_surcharge,
        add_ons_cost=add_ons_cost,
        custom_add_ons_cost=custom_add_ons_cost,
        subtotal=subtotal,
        vat=vat,
        total=total,
    )


def to_minor_units(amount: Decimal) -> int:
    """AED amount to fils for the payment provider."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
