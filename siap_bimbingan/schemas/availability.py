from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from siap_bimbingan.schemas.common import CamelModel, TimeStr, ensure_end_after_start


class AvailabilityCreate(CamelModel):
    is_recurring: bool = True
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    specific_date: Optional[date] = None
    start_time: TimeStr
    end_time: TimeStr
    location: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def check_slot(self):
        ensure_end_after_start(self.start_time, self.end_time)
        if self.is_recurring and self.day_of_week is None:
            raise ValueError("Day of week is required for a recurring slot")
        if not self.is_recurring and self.specific_date is None:
            raise ValueError("Specific date is required for a one-off slot")
        return self


class AvailabilityUpdate(CamelModel):
    is_recurring: Optional[bool] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    specific_date: Optional[date] = None
    start_time: Optional[TimeStr] = None
    end_time: Optional[TimeStr] = None
    location: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class AvailabilityToggle(CamelModel):
    is_active: bool


class AvailabilityRead(CamelModel):
    availability_id: int
    dosen_id: int
    is_recurring: bool
    day_of_week: Optional[int] = None
    specific_date: Optional[date] = None
    start_time: str
    end_time: str
    location: Optional[str] = None
    is_active: bool
    created_at: datetime


class AvailableSlot(CamelModel):
    availability_id: int
    start_time: str
    end_time: str
    location: Optional[str] = None
    is_available: bool


class AvailableSlotsResponse(CamelModel):
    dosen_id: int
    requested_date: date
    available_slots: List[AvailableSlot]
