# siap_bimbingan/schemas/schedule.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from siap_bimbingan.schemas.common import CamelModel, TimeStr, ensure_end_after_start


class ScheduleBase(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: TimeStr
    end_time: TimeStr
    course_code: Optional[str] = Field(default=None, max_length=20)
    course_name: str = Field(min_length=1, max_length=100)
    room: Optional[str] = Field(default=None, max_length=100)
    semester: str = Field(default="Default", max_length=50)


class ScheduleCreate(ScheduleBase):
    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class ScheduleUpdate(CamelModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[TimeStr] = None
    end_time: Optional[TimeStr] = None
    course_code: Optional[str] = Field(default=None, max_length=20)
    course_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    room: Optional[str] = Field(default=None, max_length=100)
    semester: Optional[str] = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class ScheduleRead(ScheduleBase):
    schedule_id: int
    user_id: int
    created_at: datetime


class ConflictCheckRequest(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: TimeStr
    end_time: TimeStr
    exclude_id: Optional[int] = None

    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class ConflictCheckResponse(CamelModel):
    has_conflict: bool
    conflicts: List[ScheduleRead]
