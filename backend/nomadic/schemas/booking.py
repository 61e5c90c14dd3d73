"""
Pydantic schemas for booking requests and responses.

BookingCreate keeps the admission-checked fields optional so that the
admission rule, not request parsing, reports missing values (400 with a
readable message instead of a 422 field dump).
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from nomadic.services.pricing import PriceBreakdown

LocationName = Literal["Desert", "Mountain", "Wadi"]
Arrangement = Literal["all-singles", "two-doubles", "mix", "custom"]


class SleepingArrangement(BaseModel):
    tent_number: int = Field(..., ge=1, le=5)
    arrangement: Arrangement
    custom_arrangement: Optional[str] = Field(None, max_length=255)


class AddOns(BaseModel):
    charcoal: bool = False
    firewood: bool = False
    portable_toilet: bool = False


class BookingCreate(BaseModel):
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=32)
    booking_date: Optional[date] = None
    location: Optional[LocationName] = None
    number_of_tents: Optional[int] = None
    adults: Optional[int] = Field(None, ge=0)
    children: Optional[int] = Field(None, ge=0)
    sleeping_arrangements: Optional[list[SleepingArrangement]] = None
    add_ons: AddOns = Field(default_factory=AddOns)
    has_children: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=2000)
    selected_custom_add_ons: list[str] = Field(default_factory=list)

    @field_validator("customer_name", "customer_email", "customer_phone", "location", "booking_date", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class PriceBreakdownResponse(BaseModel):
    tent_price: float
    location_surcharge: float
    add_ons_cost: float
    custom_add_ons_cost: float
    subtotal: float
    vat: float
    total: float

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "PriceBreakdownResponse":
        return cls(**{name: float(value) for name, value in breakdown.as_dict().items()})


class BookingCreatedResponse(BaseModel):
    booking_id: int
    pricing: PriceBreakdownResponse


class BookingResponse(BaseModel):
    id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    booking_date: date
    location: str
    number_of_tents: int
    adults: int
    children: int
    has_children: bool
    sleeping_arrangements: list[SleepingArrangement]
    add_ons: AddOns
    selected_custom_add_ons: list[str]
    notes: Optional[str]
    tent_price: float
    location_surcharge: float
    add_ons_cost: float
    custom_add_ons_cost: float
    subtotal: float
    vat: float
    total: float
    is_paid: bool
    stripe_session_id: Optional[str]
    stripe_payment_intent_id: Optional[str]
    paid_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    pagination: Pagination
