# siap_bimbingan/models/schedule.py
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from siap_bimbingan.utils.time_utils import get_indonesia_time


# Teaching schedule of a dosen or course schedule of a mahasiswa, owned by user_id
class ScheduleEntry(SQLModel, table=True):
    __tablename__ = "schedule_entry"

    schedule_id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.user_id", index=True, ondelete="CASCADE")
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    course_code: Optional[str] = Field(default=None, max_length=20)
    course_name: str = Field(max_length=100)
    room: Optional[str] = Field(default=None, max_length=100)
    semester: str = Field(default="Default", max_length=50)
    created_at: datetime = Field(default_factory=get_indonesia_time)
