from datetime import datetime
from typing import List

from pydantic import Field

from siap_bimbingan.schemas.common import CamelModel, Pagination
from siap_bimbingan.utils.constants import ThesisStatus, ThesisType


class ThesisProjectCreate(CamelModel):
    mahasiswa_id: int
    judul: str = Field(min_length=10, max_length=500)
    tipe: ThesisType
    semester: str = Field(min_length=1, max_length=50)
    supervisor_ids: List[int] = Field(min_length=1, max_length=3)


class SupervisorRead(CamelModel):
    dosen_id: int
    nama: str
    nip: str
    supervisor_order: int


class ThesisProjectRead(CamelModel):
    thesis_project_id: int
    mahasiswa_id: int
    judul: str
    tipe: ThesisType
    semester: str
    status: ThesisStatus
    created_at: datetime
    supervisors: List[SupervisorRead] = []


class ThesisProjectList(CamelModel):
    items: List[ThesisProjectRead]
    pagination: Pagination
