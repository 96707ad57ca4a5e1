"""
Landing-page summaries for each role.

Counts come straight from the database; the mahasiswa dashboard reuses the
progress accounting so its UTS/UAS numbers match ``/mahasiswa/progress``.
"""
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from siap_bimbingan.crud.guidance import session_to_dict
from siap_bimbingan.crud.thesis import get_active_project, get_supervisors
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.thesis_project import ThesisProject, ThesisSupervisor
from siap_bimbingan.models.user import User
from siap_bimbingan.services.progress_service import compute_progress, get_period_boundaries
from siap_bimbingan.utils.constants import SessionStatus, ThesisStatus
from siap_bimbingan.utils.time_utils import get_indonesia_date

RECENT_LIMIT = 5
LIVE_STATUSES = [
    SessionStatus.PENDING.value,
    SessionStatus.OFFERED.value,
    SessionStatus.APPROVED.value,
]


def _count(db: Session, model, *filters) -> int:
    return db.exec(select(func.count()).select_from(model).where(*filters)).one()


def get_admin_stats(db: Session) -> dict:
    """Jumlah pengguna, proyek aktif dan sesi bimbingan per status."""
    by_status = {s.value: 0 for s in SessionStatus}
    rows = db.exec(
        select(GuidanceSession.status, func.count()).group_by(GuidanceSession.status)
    ).all()
    for session_status, total in rows:
        by_status[session_status] = total

    return {
        "total_users": _count(db, User),
        "total_dosen": _count(db, Dosen),
        "total_mahasiswa": _count(db, Mahasiswa),
        "active_projects": _count(
            db, ThesisProject, ThesisProject.status == ThesisStatus.ACTIVE.value
        ),
        "total_sessions": sum(by_status.values()),
        "pending_sessions": by_status[SessionStatus.PENDING.value],
        "completed_sessions": by_status[SessionStatus.COMPLETED.value],
        "sessions_by_status": by_status,
    }


def get_dosen_dashboard(db: Session, dosen: Dosen) -> dict:
    """
    Dashboard dosen: jumlah mahasiswa bimbingan, permintaan yang menunggu,
    sesi hari ini dan sesi yang selesai bulan ini.

    Pending requests and today's sessions are the ones booked with this
    dosen, since only they can act on them.
    """
    today = get_indonesia_date()
    month_start = today.replace(day=1)

    total_students = db.exec(
        select(func.count(func.distinct(ThesisSupervisor.thesis_project_id)))
        .select_from(ThesisSupervisor)
        .join(ThesisProject, ThesisSupervisor.thesis_project_id == ThesisProject.thesis_project_id)
        .where(
            ThesisSupervisor.dosen_id == dosen.dosen_id,
            ThesisProject.status == ThesisStatus.ACTIVE.value,
        )
    ).one()

    pending_filter = (
        GuidanceSession.dosen_id == dosen.dosen_id,
        GuidanceSession.status == SessionStatus.PENDING.value,
    )
    pending_total = _count(db, GuidanceSession, *pending_filter)
    completed_this_month = _count(
        db,
        GuidanceSession,
        GuidanceSession.dosen_id == dosen.dosen_id,
        GuidanceSession.status == SessionStatus.COMPLETED.value,
        GuidanceSession.scheduled_date >= month_start,
    )

    today_sessions = db.exec(
        select(GuidanceSession)
        .where(
            GuidanceSession.dosen_id == dosen.dosen_id,
            GuidanceSession.scheduled_date == today,
            GuidanceSession.status.in_(
                [SessionStatus.PENDING.value, SessionStatus.APPROVED.value]
            ),
        )
        .order_by(GuidanceSession.start_time)
    ).all()

    recent_requests = db.exec(
        select(GuidanceSession)
        .where(*pending_filter)
        .order_by(GuidanceSession.created_at.desc())
        .limit(RECENT_LIMIT)
    ).all()

    return {
        "stats": {
            "total_students": total_students,
            "pending_requests": pending_total,
            "today_sessions": len(today_sessions),
            "completed_this_month": completed_this_month,
        },
        "today_sessions": [session_to_dict(db, s) for s in today_sessions],
        "pending_requests": [session_to_dict(db, s) for s in recent_requests],
    }


def _upcoming_sessions(db: Session, thesis_project_id: int) -> List[GuidanceSession]:
    query = (
        select(GuidanceSession)
        .where(
            GuidanceSession.thesis_project_id == thesis_project_id,
            GuidanceSession.scheduled_date >= get_indonesia_date(),
            GuidanceSession.status.in_(LIVE_STATUSES),
        )
        .order_by(GuidanceSession.scheduled_date, GuidanceSession.start_time)
        .limit(RECENT_LIMIT)
    )
    return list(db.exec(query).all())


def get_mahasiswa_dashboard(db: Session, mahasiswa: Mahasiswa) -> dict:
    project = get_active_project(db, mahasiswa.mahasiswa_id)
    if project is None:
        return {"stats": {}, "upcoming_sessions": [], "has_thesis_project": False}

    sessions = db.exec(
        select(GuidanceSession).where(
            GuidanceSession.thesis_project_id == project.thesis_project_id
        )
    ).all()
    uts_date, uas_date = get_period_boundaries(db)
    progress = compute_progress(project.tipe, sessions, uts_date, uas_date)

    return {
        "stats": {
            "total_guidance": sum(
                1 for s in sessions if s.status == SessionStatus.COMPLETED.value
            ),
            "pending_sessions": sum(
                1 for s in sessions if s.status == SessionStatus.PENDING.value
            ),
            "before_uts": progress["completed_before_uts"],
            "before_uas": progress["completed_before_uas"],
            "can_graduate": progress["can_graduate"],
        },
        "upcoming_sessions": [
            session_to_dict(db, s) for s in _upcoming_sessions(db, project.thesis_project_id)
        ],
        "thesis_project": {
            "thesis_project_id": project.thesis_project_id,
            "judul": project.judul,
            "tipe": project.tipe,
            "semester": project.semester,
            "supervisors": get_supervisors(db, project.thesis_project_id),
        },
        "has_thesis_project": True,
    }
