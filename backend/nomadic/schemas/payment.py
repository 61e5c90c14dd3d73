"""
Pydantic schemas for checkout and webhook responses.
"""

from pydantic import BaseModel


class CheckoutSessionCreate(BaseModel):
    booking_id: int


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: str


class WebhookAck(BaseModel):
    received: bool = True
