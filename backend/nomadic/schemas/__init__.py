from nomadic.schemas.booking import (
    BookingCreate, BookingCreatedResponse, BookingResponse, BookingListResponse, PriceBreakdownResponse,
)
from nomadic.schemas.availability import (
    DateConstraintsResponse, DateConstraintsUpdate, DateConstraintsUpdateResponse,
)
from nomadic.schemas.settings import (
    PricingSettingsResponse, PricingSettingsUpdate, PricingSettingsUpdateResponse,
)
from nomadic.schemas.stats import BookingStats, ChartsResponse
from nomadic.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse, WebhookAck

__all__ = [
    "BookingCreate", "BookingCreatedResponse", "BookingResponse", "BookingListResponse", "PriceBreakdownResponse",
    "DateConstraintsResponse", "DateConstraintsUpdate", "DateConstraintsUpdateResponse",
    "PricingSettingsResponse", "PricingSettingsUpdate", "PricingSettingsUpdateResponse",
    "BookingStats", "ChartsResponse",
    "CheckoutSessionCreate", "CheckoutSessionResponse", "WebhookAck",
]
