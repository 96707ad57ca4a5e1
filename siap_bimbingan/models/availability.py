from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional
from datetime import datetime, date

from siap_bimbingan.utils.time_utils import get_indonesia_time

if TYPE_CHECKING:
    from siap_bimbingan.models.dosen import Dosen


class AvailabilitySlot(SQLModel, table=True):
    __tablename__ = "availability_slot"

    availability_id: Optional[int] = Field(default=None, primary_key=True)
    dosen_id: int = Field(foreign_key="dosen.dosen_id", index=True, ondelete="CASCADE")
    is_recurring: bool = Field(default=True)
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    specific_date: Optional[date] = Field(default=None)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    location: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=get_indonesia_time)

    dosen: Optional["Dosen"] = Relationship(back_populates="availabilities")
