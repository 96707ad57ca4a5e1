from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from siap_bimbingan.schemas.common import CamelModel, Pagination, TimeStr, ensure_end_after_start
from siap_bimbingan.utils.constants import SessionStatus, ThesisType


class SessionRequestCreate(CamelModel):
    availability_id: int
    scheduled_date: date
    agenda: Optional[str] = Field(default=None, max_length=1000)


class SessionOfferCreate(CamelModel):
    mahasiswa_id: int
    scheduled_date: date
    start_time: TimeStr
    end_time: TimeStr
    location: str = Field(min_length=1, max_length=100)
    agenda: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class SessionRequestUpdate(CamelModel):
    availability_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    agenda: Optional[str] = Field(default=None, max_length=1000)


class SessionApprove(CamelModel):
    location: Optional[str] = Field(default=None, max_length=100)


class SessionReject(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class SessionDecline(CamelModel):
    reason: str = Field(min_length=1, max_length=500)


class NoteCreate(CamelModel):
    content: str = Field(min_length=1)
    tasks: Optional[str] = None


class NoteRead(CamelModel):
    note_id: int
    session_id: int
    dosen_id: int
    dosen_nama: Optional[str] = None
    content: str
    tasks: Optional[str] = None
    created_at: datetime


class SessionRead(CamelModel):
    session_id: int
    thesis_project_id: int
    dosen_id: int
    dosen_nama: Optional[str] = None
    mahasiswa_id: Optional[int] = None
    mahasiswa_nama: Optional[str] = None
    npm: Optional[str] = None
    judul: Optional[str] = None
    tipe: Optional[ThesisType] = None
    availability_id: Optional[int] = None
    scheduled_date: date
    start_time: str
    end_time: str
    location: str
    status: SessionStatus
    agenda: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime
    notes: List[NoteRead] = []


class SessionList(CamelModel):
    sessions: List[SessionRead]
    pagination: Pagination
