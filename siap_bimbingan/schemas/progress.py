from datetime import date
from typing import List, Optional

from siap_bimbingan.schemas.common import CamelModel
from siap_bimbingan.utils.constants import ThesisType


class GuidanceProgress(CamelModel):
    thesis_type: ThesisType
    uts_date: date
    uas_date: date
    completed_before_uts: int
    completed_before_uas: int
    completed_after_uas: int
    required_before_uts: int
    required_before_uas: int
    meets_uts_requirement: bool
    meets_uas_requirement: bool
    can_graduate: bool


class CompletedSessionSummary(CamelModel):
    session_id: int
    scheduled_date: date
    location: str
    has_notes: bool


class StudentProgress(CamelModel):
    mahasiswa_id: int
    npm: str
    nama: str
    thesis_project_id: int
    judul: str
    semester: str
    dosen: Optional[str] = None
    total_guidance: int
    progress: GuidanceProgress


class StudentProgressDetail(StudentProgress):
    sessions: List[CompletedSessionSummary] = []


class MonitoringSummary(CamelModel):
    total_students: int
    meeting_requirements: int
    not_meeting_requirements: int


class MonitoringReport(CamelModel):
    summary: MonitoringSummary
    students: List[StudentProgress]
