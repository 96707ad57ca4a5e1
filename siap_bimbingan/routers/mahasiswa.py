from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from siap_bimbingan.crud.availability import get_available_slots
from siap_bimbingan.crud.guidance import (
    accept_session,
    cancel_session,
    decline_session,
    get_mahasiswa_sessions,
    get_session_for_mahasiswa,
    request_session,
    session_to_dict,
    update_session_request,
)
from siap_bimbingan.crud.schedule import (
    create_schedule,
    delete_schedule,
    get_schedule,
    get_schedules,
    update_schedule,
)
from siap_bimbingan.crud.thesis import get_active_project, get_supervisors, is_supervisor
from siap_bimbingan.dependencies import get_current_mahasiswa, get_db, require_roles
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.schemas.availability import AvailableSlotsResponse
from siap_bimbingan.schemas.common import MessageResponse
from siap_bimbingan.schemas.dashboard import MahasiswaDashboard
from siap_bimbingan.schemas.guidance import (
    SessionDecline,
    SessionList,
    SessionRead,
    SessionRequestCreate,
    SessionRequestUpdate,
)
from siap_bimbingan.schemas.progress import StudentProgressDetail
from siap_bimbingan.schemas.schedule import ScheduleCreate, ScheduleRead, ScheduleUpdate
from siap_bimbingan.schemas.thesis import SupervisorRead
from siap_bimbingan.services.dashboard_service import get_mahasiswa_dashboard
from siap_bimbingan.services.progress_service import get_mahasiswa_progress
from siap_bimbingan.utils.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Role, SessionStatus

# Access Control: MAHASISWA only
# - A mahasiswa manages only their own course schedule and sessions

router = APIRouter(
    prefix="/mahasiswa",
    tags=["mahasiswa"],
    dependencies=[Depends(require_roles(Role.MAHASISWA))],
    responses={404: {"description": "Not found"}},
)


# Dashboard


@router.get("/dashboard", response_model=MahasiswaDashboard)
def dashboard_endpoint(
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """Guidance counts, upcoming sessions and the active thesis project, if any."""
    return get_mahasiswa_dashboard(db, mahasiswa)


# Course schedules


@router.get("/schedules", response_model=List[ScheduleRead])
def read_schedules_endpoint(
    day_of_week: Optional[int] = Query(None, alias="dayOfWeek", ge=0, le=6),
    semester: Optional[str] = None,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return get_schedules(db, mahasiswa.user_id, day_of_week=day_of_week, semester=semester)


@router.post("/schedules", response_model=ScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule_endpoint(
    schedule: ScheduleCreate,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """Add a course schedule entry; overlapping entries on the same day are rejected."""
    return create_schedule(db, mahasiswa.user_id, schedule)


@router.get("/schedules/{schedule_id}", response_model=ScheduleRead)
def read_schedule_endpoint(
    schedule_id: int,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return get_schedule(db, mahasiswa.user_id, schedule_id)


@router.put("/schedules/{schedule_id}", response_model=ScheduleRead)
def update_schedule_endpoint(
    schedule_id: int,
    schedule: ScheduleUpdate,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return update_schedule(db, mahasiswa.user_id, schedule_id, schedule)


@router.delete("/schedules/{schedule_id}", response_model=MessageResponse)
def delete_schedule_endpoint(
    schedule_id: int,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    delete_schedule(db, mahasiswa.user_id, schedule_id)
    return {"message": "Schedule deleted successfully"}


# Supervisors and slots


@router.get("/supervisors", response_model=List[SupervisorRead])
def read_supervisors_endpoint(
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """Supervisors of the active thesis project, main supervisor first."""
    project = get_active_project(db, mahasiswa.mahasiswa_id)
    if project is None:
        return []
    return get_supervisors(db, project.thesis_project_id)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def read_available_slots_endpoint(
    dosen_id: int = Query(..., alias="dosenId"),
    requested_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """
    Slots a supervisor offers on a date, each marked available or not.

    A slot is unavailable when it overlaps either party's schedule or a live
    session of either party.

    Raises:
        HTTPException: 404 if the dosen is not one of the student's supervisors
    """
    dosen = db.get(Dosen, dosen_id)
    project = get_active_project(db, mahasiswa.mahasiswa_id)
    if dosen is None or project is None or not is_supervisor(
        db, project.thesis_project_id, dosen_id
    ):
        raise HTTPException(
            status_code=404, detail=f"Supervisor with ID {dosen_id} not found"
        )

    return {
        "dosen_id": dosen_id,
        "requested_date": requested_date,
        "available_slots": get_available_slots(db, dosen, mahasiswa, requested_date),
    }


# Guidance sessions


@router.get("/sessions", response_model=SessionList)
def read_sessions_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return get_mahasiswa_sessions(
        db, mahasiswa.mahasiswa_id, page=page, limit=limit, status_filter=status_filter
    )


@router.post("/sessions", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def request_session_endpoint(
    request: SessionRequestCreate,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """
    Request guidance in a supervisor's availability slot.
    The session starts PENDING until the dosen approves or rejects it.
    """
    session = request_session(db, mahasiswa, mahasiswa.user_id, request)
    return session_to_dict(db, session)


@router.get("/sessions/{session_id}", response_model=SessionRead)
def read_session_endpoint(
    session_id: int,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return session_to_dict(
        db, get_session_for_mahasiswa(db, mahasiswa.mahasiswa_id, session_id)
    )


@router.put("/sessions/{session_id}", response_model=SessionRead)
def update_session_endpoint(
    session_id: int,
    changes: SessionRequestUpdate,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """Move a PENDING request to another slot or date of its supervisors, or edit its agenda."""
    session = update_session_request(db, mahasiswa, session_id, changes)
    return session_to_dict(db, session)


@router.put("/sessions/{session_id}/cancel", response_model=SessionRead)
def cancel_session_endpoint(
    session_id: int,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return session_to_dict(db, cancel_session(db, mahasiswa, session_id))


@router.put("/sessions/{session_id}/accept", response_model=SessionRead)
def accept_session_endpoint(
    session_id: int,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    return session_to_dict(db, accept_session(db, mahasiswa, session_id))


@router.put("/sessions/{session_id}/decline", response_model=SessionRead)
def decline_session_endpoint(
    session_id: int,
    body: SessionDecline,
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """Decline an OFFERED session; a reason is required."""
    return session_to_dict(db, decline_session(db, mahasiswa, session_id, body.reason))


# Progress


@router.get("/progress", response_model=StudentProgressDetail)
def read_progress_endpoint(
    db: Session = Depends(get_db),
    mahasiswa: Mahasiswa = Depends(get_current_mahasiswa),
):
    """
    Completed guidance counted against the UTS and UAS thresholds of the
    student's thesis type.
    """
    progress = get_mahasiswa_progress(db, mahasiswa)
    if progress is None:
        raise HTTPException(status_code=404, detail="No active thesis project")
    return progress
