"""
Pricing settings singleton (always row id=1), edited from the admin panel.
"""

from decimal import Decimal

from sqlalchemy import Column, DateTime, Integer, JSON, Numeric

from nomadic.db.base import Base, utcnow

SETTINGS_ROW_ID = 1

DEFAULT_PRICING = {
    "weekday_price": Decimal("1297"),  # Mon-Thu, single tent
    "weekend_price": Decimal("1497"),  # Fri-Sun, single tent
    "multiple_tents_price": Decimal("1297"),  # per tent, 2+ tents, any day
    "charcoal_price": Decimal("60"),
    "firewood_price": Decimal("75"),
    "portable_toilet_price": Decimal("200"),
    "wadi_surcharge": Decimal("250"),
    "vat_rate": Decimal("0.05"),
}


class PricingSettings(Base):
    __tablename__ = "pricing_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)

    weekday_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["weekday_price"])
    weekend_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["weekend_price"])
    multiple_tents_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["multiple_tents_price"])

    charcoal_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["charcoal_price"])
    firewood_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["firewood_price"])
    portable_toilet_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["portable_toilet_price"])

    wadi_surcharge = Column(Numeric(12, 2), nullable=False, default=DEFAULT_PRICING["wadi_surcharge"])
    vat_rate = Column(Numeric(6, 4), nullable=False, default=DEFAULT_PRICING["vat_rate"])

    custom_add_ons = Column(JSON, nullable=False, default=list)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<PricingSettings(weekday={self.weekday_price}, weekend={self.weekend_price}, vat={self.vat_rate})>"
