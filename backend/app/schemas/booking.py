"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    guest_name: str = Field(..., min_length=1, max_length=255)
    unit_id: str = Field(..., min_length=1, max_length=100)
    check_in_date: date
    number_of_nights: int = Field(..., gt=0)


class BookingExtend(BaseModel):
    # 0 is accepted as a no-op extension
    number_of_nights: int = Field(..., ge=0)


class BookingResponse(BaseModel):
    id: int
    guest_name: str
    unit_id: str
    check_in_date: date
    number_of_nights: int
    check_out_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RejectionResponse(BaseModel):
    kind: str
    detail: str
