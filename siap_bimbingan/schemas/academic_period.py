from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from siap_bimbingan.schemas.common import CamelModel


def _check_period_dates(start_date, end_date, uts_date, uas_date):
    if None in (start_date, end_date, uts_date, uas_date):
        return
    if not start_date <= uts_date < uas_date <= end_date:
        raise ValueError(
            "Dates must satisfy startDate <= utsDate < uasDate <= endDate"
        )


class AcademicPeriodCreate(CamelModel):
    semester: str = Field(min_length=1, max_length=50)
    start_date: date
    end_date: date
    uts_date: date
    uas_date: date

    @model_validator(mode="after")
    def check_dates(self):
        _check_period_dates(self.start_date, self.end_date, self.uts_date, self.uas_date)
        return self


class AcademicPeriodUpdate(CamelModel):
    semester: Optional[str] = Field(default=None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    uts_date: Optional[date] = None
    uas_date: Optional[date] = None


class AcademicPeriodRead(CamelModel):
    period_id: int
    semester: str
    start_date: date
    end_date: date
    uts_date: date
    uas_date: date
    is_active: bool
    created_at: datetime
