"""
Pydantic schemas for date constraint queries and repairs.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from nomadic.schemas.booking import LocationName


class DateConstraintsResponse(BaseModel):
    locked_location: Optional[str]
    total_tents: int
    remaining_capacity: int
    available_locations: list[str]


class DateConstraintsUpdate(BaseModel):
    date: Optional[datetime.date] = None
    location: Optional[LocationName] = None
    tents: Optional[int] = Field(None, ge=0)


class DateConstraintsUpdateResponse(BaseModel):
    success: bool = True
    locked_location: str
    total_tents: int
    remaining_capacity: int
