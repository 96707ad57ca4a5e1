from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, date

from siap_bimbingan.utils.time_utils import get_indonesia_time


class AcademicPeriod(SQLModel, table=True):
    __tablename__ = "academic_period"

    period_id: Optional[int] = Field(default=None, primary_key=True)
    semester: str = Field(max_length=50)
    start_date: date = Field()
    end_date: date = Field()
    uts_date: date = Field()
    uas_date: date = Field()
    is_active: bool = Field(default=False)
    created_at: datetime = Field(default_factory=get_indonesia_time)
