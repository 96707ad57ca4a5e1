from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Tuple
import logging

from sqlmodel import Session, select

from siap_bimbingan import config
from siap_bimbingan.crud.academic_period import get_active_academic_period
from siap_bimbingan.crud.thesis import get_active_project
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceNote, GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.thesis_project import ThesisProject, ThesisSupervisor
from siap_bimbingan.utils.constants import (
    THESIS_REQUIREMENTS,
    SessionStatus,
    ThesisStatus,
    ThesisType,
)

logger = logging.getLogger(__name__)


def _get(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field)


def compute_progress(
    thesis_type, sessions: Iterable[Any], uts_date: date, uas_date: date
) -> dict:
    """
    Count completed guidance sessions per exam bucket and derive eligibility.

    A session counts toward the UTS bucket when it took place on or before
    ``uts_date`` and toward the UAS bucket when it falls in
    ``(uts_date, uas_date]``. Sessions after ``uas_date`` are reported in
    ``completed_after_uas`` and count toward neither. Only COMPLETED sessions
    are counted.

    Args:
        thesis_type: TA1 or TA2
        sessions: Objects or mappings with ``status`` and ``scheduled_date``
        uts_date: Midterm boundary of the academic period
        uas_date: Final boundary of the academic period

    Returns:
        dict: Fields of the GuidanceProgress schema
    """
    thesis_type = ThesisType(thesis_type)
    requirement = THESIS_REQUIREMENTS[thesis_type]

    before_uts = before_uas = after_uas = 0
    for session in sessions:
        if SessionStatus(_get(session, "status")) != SessionStatus.COMPLETED:
            continue
        scheduled = _get(session, "scheduled_date")
        if scheduled <= uts_date:
            before_uts += 1
        elif scheduled <= uas_date:
            before_uas += 1
        else:
            after_uas += 1

    meets_uts = before_uts >= requirement["before_uts"]
    meets_uas = before_uas >= requirement["before_uas"]

    return {
        "thesis_type": thesis_type,
        "uts_date": uts_date,
        "uas_date": uas_date,
        "completed_before_uts": before_uts,
        "completed_before_uas": before_uas,
        "completed_after_uas": after_uas,
        "required_before_uts": requirement["before_uts"],
        "required_before_uas": requirement["before_uas"],
        "meets_uts_requirement": meets_uts,
        "meets_uas_requirement": meets_uas,
        "can_graduate": meets_uts and meets_uas,
    }


def get_period_boundaries(db: Session) -> Tuple[date, date]:
    """UTS/UAS dates of the active academic period, falling back to config."""
    period = get_active_academic_period(db)
    if period is None:
        return config.UTS_DATE, config.UAS_DATE
    return period.uts_date, period.uas_date


def get_completed_sessions(db: Session, thesis_project_id: int) -> List[GuidanceSession]:
    query = (
        select(GuidanceSession)
        .where(
            GuidanceSession.thesis_project_id == thesis_project_id,
            GuidanceSession.status == SessionStatus.COMPLETED.value,
        )
        .order_by(GuidanceSession.scheduled_date)
    )
    return list(db.exec(query).all())


def _supervisor_names(db: Session, thesis_project_id: int) -> Optional[str]:
    query = (
        select(Dosen.nama)
        .join(ThesisSupervisor, ThesisSupervisor.dosen_id == Dosen.dosen_id)
        .where(ThesisSupervisor.thesis_project_id == thesis_project_id)
        .order_by(ThesisSupervisor.supervisor_order)
    )
    names = list(db.exec(query).all())
    return ", ".join(names) if names else None


def build_student_progress(
    db: Session,
    project: ThesisProject,
    mahasiswa: Mahasiswa,
    uts_date: date,
    uas_date: date,
    include_sessions: bool = False,
) -> dict:
    sessions = get_completed_sessions(db, project.thesis_project_id)
    result = {
        "mahasiswa_id": mahasiswa.mahasiswa_id,
        "npm": mahasiswa.npm,
        "nama": mahasiswa.nama,
        "thesis_project_id": project.thesis_project_id,
        "judul": project.judul,
        "semester": project.semester,
        "dosen": _supervisor_names(db, project.thesis_project_id),
        "total_guidance": len(sessions),
        "progress": compute_progress(project.tipe, sessions, uts_date, uas_date),
    }

    if include_sessions:
        noted = set(
            db.exec(
                select(GuidanceNote.session_id).where(
                    GuidanceNote.session_id.in_([s.session_id for s in sessions])
                )
            ).all()
        )
        result["sessions"] = [
            {
                "session_id": s.session_id,
                "scheduled_date": s.scheduled_date,
                "location": s.location,
                "has_notes": s.session_id in noted,
            }
            for s in sessions
        ]

    return result


def get_mahasiswa_progress(db: Session, mahasiswa: Mahasiswa) -> Optional[dict]:
    project = get_active_project(db, mahasiswa.mahasiswa_id)
    if project is None:
        return None
    uts_date, uas_date = get_period_boundaries(db)
    return build_student_progress(
        db, project, mahasiswa, uts_date, uas_date, include_sessions=True
    )


def get_supervised_students_progress(db: Session, dosen_id: int) -> List[dict]:
    """Progress of every active thesis project the dosen supervises."""
    uts_date, uas_date = get_period_boundaries(db)
    query = (
        select(ThesisProject, Mahasiswa)
        .join(Mahasiswa, ThesisProject.mahasiswa_id == Mahasiswa.mahasiswa_id)
        .join(
            ThesisSupervisor,
            ThesisSupervisor.thesis_project_id == ThesisProject.thesis_project_id,
        )
        .where(
            ThesisSupervisor.dosen_id == dosen_id,
            ThesisProject.status == ThesisStatus.ACTIVE.value,
        )
        .order_by(Mahasiswa.nama)
    )
    return [
        build_student_progress(db, project, mahasiswa, uts_date, uas_date)
        for project, mahasiswa in db.exec(query).all()
    ]


def get_monitoring_report(
    db: Session,
    semester: Optional[str] = None,
    tipe: Optional[str] = None,
    only_not_meeting: bool = False,
) -> dict:
    """
    Eligibility of every active thesis project, with summary counts.

    Args:
        db: Database session
        semester: Optional semester filter
        tipe: Optional thesis type filter (TA1/TA2)
        only_not_meeting: Keep only students who cannot graduate yet

    Returns:
        dict: ``summary`` counts and the ``students`` list
    """
    uts_date, uas_date = get_period_boundaries(db)
    query = (
        select(ThesisProject, Mahasiswa)
        .join(Mahasiswa, ThesisProject.mahasiswa_id == Mahasiswa.mahasiswa_id)
        .where(ThesisProject.status == ThesisStatus.ACTIVE.value)
        .order_by(Mahasiswa.npm)
    )
    if semester is not None:
        query = query.where(ThesisProject.semester == semester)
    if tipe is not None:
        query = query.where(ThesisProject.tipe == tipe)

    students = [
        build_student_progress(db, project, mahasiswa, uts_date, uas_date)
        for project, mahasiswa in db.exec(query).all()
    ]
    total = len(students)
    meeting = sum(1 for s in students if s["progress"]["can_graduate"])

    if only_not_meeting:
        students = [s for s in students if not s["progress"]["can_graduate"]]

    logger.info(f"Monitoring report built: {meeting} of {total} students eligible")

    return {
        "summary": {
            "total_students": total,
            "meeting_requirements": meeting,
            "not_meeting_requirements": total - meeting,
        },
        "students": students,
    }
