"""
Tests for the booking price calculation.
"""

from datetime import date
from decimal import Decimal

from nomadic.services.pricing import (
    CustomAddOn,
    PricingConfig,
    calculate_booking_price,
    is_weekend,
    select_custom_add_ons,
    to_decimal,
    to_minor_units,
)

MONDAY = date(2026, 11, 2)
FRIDAY = date(2026, 11, 6)
SUNDAY = date(2026, 11, 8)

NO_ADD_ONS = {"charcoal": False, "firewood": False, "portable_toilet": False}


def test_single_tent_weekday():
    price = calculate_booking_price(1, "Desert", NO_ADD_ONS, False, booking_date=MONDAY)
    assert price.tent_price == Decimal("1297")
    assert price.subtotal == Decimal("1297")
    assert price.vat == Decimal("64.85")
    assert price.total == Decimal("1361.85")


def test_three_tents_wadi():
    price = calculate_booking_price(3, "Wadi", NO_ADD_ONS, False, booking_date=MONDAY)
    assert price.tent_price == Decimal("3891")
    assert price.location_surcharge == Decimal("250")
    assert price.subtotal == Decimal("4141")
    assert price.vat == Decimal("207.05")
    assert price.total == Decimal("4348.05")


def test_single_tent_weekend_rate():
    for day in (FRIDAY, date(2026, 11, 7), SUNDAY):
        price = calculate_booking_price(1, "Mountain", NO_ADD_ONS, False, booking_date=day)
        assert price.tent_price == Decimal("1497")


def test_single_tent_without_date_uses_weekend_rate():
    price = calculate_booking_price(1, "Desert", NO_ADD_ONS, False)
    assert price.tent_price == Decimal("1497")


def test_multiple_tents_ignore_weekday():
    config = PricingConfig(multiple_tents_price=Decimal("1100"))
    weekday = calculate_booking_price(2, "Desert", NO_ADD_ONS, False, config=config, booking_date=MONDAY)
    weekend = calculate_booking_price(2, "Desert", NO_ADD_ONS, False, config=config, booking_date=FRIDAY)
    assert weekday.tent_price == weekend.tent_price == Decimal("2200")


def test_wadi_surcharge_added_once():
    desert = calculate_booking_price(4, "Desert", NO_ADD_ONS, False, booking_date=MONDAY)
    wadi = calculate_booking_price(4, "Wadi", NO_ADD_ONS, False, booking_date=MONDAY)
    assert wadi.subtotal - desert.subtotal == Decimal("250")


def test_add_ons_priced():
    add_ons = {"charcoal": True, "firewood": True, "portable_toilet": True}
    price = calculate_booking_price(2, "Desert", add_ons, False, booking_date=MONDAY)
    assert price.add_ons_cost == Decimal("335")


def test_portable_toilet_free_with_children():
    add_ons = {"charcoal": False, "firewood": False, "portable_toilet": True}
    with_children = calculate_booking_price(2, "Desert", add_ons, True, booking_date=MONDAY)
    without_children = calculate_booking_price(2, "Desert", add_ons, False, booking_date=MONDAY)
    assert with_children.add_ons_cost == Decimal("0")
    assert without_children.add_ons_cost == Decimal("200")


def test_only_selected_custom_add_ons_count():
    available = (
        CustomAddOn(id="a", name="BBQ kit", price=Decimal("120")),
        CustomAddOn(id="b", name="Stargazing guide", price=Decimal("300")),
    )
    chosen = select_custom_add_ons(available, ["b", "unknown"])
    price = calculate_booking_price(2, "Desert", NO_ADD_ONS, False, custom_add_ons=chosen, booking_date=MONDAY)
    assert [addon.selected for addon in chosen] == [False, True]
    assert price.custom_add_ons_cost == Decimal("300")


def test_total_is_subtotal_plus_vat():
    config = PricingConfig(vat_rate=Decimal("0.1"))
    price = calculate_booking_price(
        5, "Wadi", {"charcoal": True}, False, config=config, booking_date=SUNDAY
    )
    assert price.vat == price.subtotal * Decimal("0.1")
    assert price.total == price.subtotal * Decimal("1.1")


def test_is_weekend():
    assert not is_weekend(MONDAY)
    assert not is_weekend(date(2026, 11, 5))  # Thursday
    assert is_weekend(FRIDAY)
    assert is_weekend(SUNDAY)


def test_to_decimal_coerces_and_falls_back():
    assert to_decimal(12.5) == Decimal("12.5")
    assert to_decimal("60") == Decimal("60")
    assert to_decimal(None, Decimal("7")) == Decimal("7")
    assert to_decimal("abc") == Decimal("0")
    assert to_decimal("NaN") == Decimal("0")


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(Decimal("1361.85")) == 136185
    assert to_minor_units(Decimal("10.005")) == 1001


def test_vat_rounded_to_fils():
    config = PricingConfig(vat_rate=Decimal("0.075"))
    price = calculate_booking_price(1, "Desert", NO_ADD_ONS, False, config=config, booking_date=MONDAY)
    assert price.vat == Decimal("97.28")
    assert price.total == Decimal("1394.28")
    assert to_minor_units(price.total) == 139428


def test_components_rounded_half_up():
    config = PricingConfig(charcoal_price=Decimal("12.345"), vat_rate=Decimal("0"))
    price = calculate_booking_price(
        1, "Desert", {"charcoal": True}, False, config=config, booking_date=MONDAY
    )
    assert price.add_ons_cost == Decimal("12.35")
    assert price.total == Decimal("1309.35")
