from nomadic.models.booking import Booking
from nomadic.models.date_lock import DateLocationLock
from nomadic.models.pricing_settings import PricingSettings

__all__ = ["Booking", "DateLocationLock", "PricingSettings"]
