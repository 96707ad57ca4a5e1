from typing import Dict, List, Optional

from siap_bimbingan.schemas.common import CamelModel
from siap_bimbingan.schemas.guidance import SessionRead
from siap_bimbingan.schemas.thesis import SupervisorRead
from siap_bimbingan.utils.constants import ThesisType


class AdminDashboardStats(CamelModel):
    total_users: int
    total_dosen: int
    total_mahasiswa: int
    active_projects: int
    total_sessions: int
    pending_sessions: int
    completed_sessions: int
    sessions_by_status: Dict[str, int]


class DosenDashboardStats(CamelModel):
    total_students: int
    pending_requests: int
    today_sessions: int
    completed_this_month: int


class DosenDashboard(CamelModel):
    stats: DosenDashboardStats
    today_sessions: List[SessionRead]
    pending_requests: List[SessionRead]


class MahasiswaDashboardStats(CamelModel):
    total_guidance: int = 0
    pending_sessions: int = 0
    before_uts: int = 0
    before_uas: int = 0
    can_graduate: bool = False


class DashboardThesisProject(CamelModel):
    thesis_project_id: int
    judul: str
    tipe: ThesisType
    semester: str
    supervisors: List[SupervisorRead] = []


class MahasiswaDashboard(CamelModel):
    stats: MahasiswaDashboardStats
    upcoming_sessions: List[SessionRead] = []
    thesis_project: Optional[DashboardThesisProject] = None
    has_thesis_project: bool = False
