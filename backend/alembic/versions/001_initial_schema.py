"""Initial schema: bookings, date location locks, pricing settings.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(12, 2)


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(32), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(20), nullable=False),
        sa.Column("number_of_tents", sa.Integer(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False),
        sa.Column("children", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("has_children", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sleeping_arrangements", sa.JSON(), nullable=False),
        sa.Column("add_ons", sa.JSON(), nullable=False),
        sa.Column("selected_custom_add_ons", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tent_price", MONEY, nullable=False),
        sa.Column("location_surcharge", MONEY, nullable=False, server_default=sa.text("0")),
        sa.Column("add_ons_cost", MONEY, nullable=False, server_default=sa.text("0")),
        sa.Column("custom_add_ons_cost", MONEY, nullable=False, server_default=sa.text("0")),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.Column("vat", MONEY, nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("stripe_session_id", sa.String(255), nullable=True),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("number_of_tents BETWEEN 1 AND 5", name="check_booking_tents_range"),
        sa.CheckConstraint("location IN ('Desert', 'Mountain', 'Wadi')", name="check_booking_location"),
        sa.UniqueConstraint("stripe_session_id", name="uq_bookings_stripe_session_id"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_customer_email", "bookings", ["customer_email"])
    # Availability scans paid bookings of one date on every submission and date lookup
    op.create_index("ix_bookings_date_paid", "bookings", ["booking_date", "is_paid"])

    op.create_table(
        "date_location_locks",
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("locked_location", sa.String(20), nullable=False),
        sa.Column("total_tents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_tents >= 0", name="check_lock_total_tents_non_negative"),
    )

    op.create_table(
        "pricing_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("weekday_price", MONEY, nullable=False, server_default=sa.text("1297")),
        sa.Column("weekend_price", MONEY, nullable=False, server_default=sa.text("1497")),
        sa.Column("multiple_tents_price", MONEY, nullable=False, server_default=sa.text("1297")),
        sa.Column("charcoal_price", MONEY, nullable=False, server_default=sa.text("60")),
        sa.Column("firewood_price", MONEY, nullable=False, server_default=sa.text("75")),
        sa.Column("portable_toilet_price", MONEY, nullable=False, server_default=sa.text("200")),
        sa.Column("wadi_surcharge", MONEY, nullable=False, server_default=sa.text("250")),
        sa.Column("vat_rate", sa.Numeric(6, 4), nullable=False, server_default=sa.text("0.05")),
        sa.Column("custom_add_ons", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("pricing_settings")
    op.drop_table("date_location_locks")
    op.drop_table("bookings")
