from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from siap_bimbingan.schemas.common import (
    CamelModel,
    IdentifierStr,
    TimeStr,
    ValidationErrorItem,
    ensure_end_after_start,
)
from siap_bimbingan.utils.constants import ThesisType


class ScheduleImportRow(CamelModel):
    nip: IdentifierStr
    day_of_week: int = Field(ge=0, le=6)
    start_time: TimeStr
    end_time: TimeStr
    course_code: Optional[str] = Field(default=None, max_length=20)
    course_name: str = Field(min_length=1, max_length=100)
    room: Optional[str] = Field(default=None, max_length=100)
    semester: str = Field(default="Default", max_length=50)

    @model_validator(mode="after")
    def check_time_range(self):
        ensure_end_after_start(self.start_time, self.end_time)
        return self


class StudentImportRow(CamelModel):
    npm: IdentifierStr
    nama: str = Field(min_length=3, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    angkatan: Optional[int] = Field(default=None, ge=2000)


class ThesisProjectImportRow(CamelModel):
    npm: IdentifierStr
    judul: str = Field(min_length=1, max_length=500)
    tipe: ThesisType = ThesisType.TA1
    supervisor_nip_1: IdentifierStr
    supervisor_nip_2: Optional[IdentifierStr] = None
    semester: str = Field(default="Default", max_length=50)

    @model_validator(mode="after")
    def check_distinct_supervisors(self):
        if self.supervisor_nip_2 and self.supervisor_nip_2 == self.supervisor_nip_1:
            raise ValueError("Supervisors must be distinct")
        return self


class ImportRowError(CamelModel):
    row: int
    errors: List[ValidationErrorItem]


class ImportResult(CamelModel):
    imported: int
    updated: int = 0
    failed: int
    errors: List[ImportRowError]
