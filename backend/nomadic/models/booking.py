"""
Booking model: one customer's reservation of tents for a calendar date.

Key design decisions:
- Price breakdown is stored with the booking, priced at submission time
- is_paid flips only through the payment webhook; bookings are never deleted
- Composite index on (booking_date, is_paid) serves the availability scan
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Index, Integer, JSON, Numeric, String, Text,
)

from nomadic.db.base import Base, TimestampMixin

LOCATIONS = ("Desert", "Mountain", "Wadi")
WADI = "Wadi"

MONEY = Numeric(12, 2)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(32), nullable=False)

    booking_date = Column(Date, nullable=False)
    location = Column(String(20), nullable=False)
    number_of_tents = Column(Integer, nullable=False)
    adults = Column(Integer, nullable=False)
    children = Column(Integer, nullable=False, default=0)
    has_children = Column(Boolean, nullable=False, default=False)
    sleeping_arrangements = Column(JSON, nullable=False, default=list)
    add_ons = Column(JSON, nullable=False, default=dict)
    selected_custom_add_ons = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    # Price breakdown
    tent_price = Column(MONEY, nullable=False)
    location_surcharge = Column(MONEY, nullable=False, default=0)
    add_ons_cost = Column(MONEY, nullable=False, default=0)
    custom_add_ons_cost = Column(MONEY, nullable=False, default=0)
    subtotal = Column(MONEY, nullable=False)
    vat = Column(MONEY, nullable=False)
    total = Column(MONEY, nullable=False)

    # Payment
    is_paid = Column(Boolean, nullable=False, default=False)
    stripe_session_id = Column(String(255), nullable=True, unique=True)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("number_of_tents BETWEEN 1 AND 5", name="check_booking_tents_range"),
        CheckConstraint("location IN ('Desert', 'Mountain', 'Wadi')", name="check_booking_location"),
        Index("ix_bookings_date_paid", "booking_date", "is_paid"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, date={self.booking_date}, location={self.location}, "
            f"tents={self.number_of_tents}, paid={self.is_paid})>"
        )
