from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from siap_bimbingan.crud.availability import (
    create_availability,
    delete_availability,
    get_availabilities,
    get_availability,
    set_availability_active,
    update_availability,
)
from siap_bimbingan.crud.guidance import (
    add_note,
    approve_session,
    complete_session,
    get_dosen_sessions,
    get_session_for_dosen,
    note_to_dict,
    offer_session,
    reject_session,
    session_to_dict,
)
from siap_bimbingan.crud.schedule import (
    create_schedule,
    delete_schedule,
    get_schedule,
    get_schedules,
    update_schedule,
)
from siap_bimbingan.crud.thesis import get_active_project, is_supervisor
from siap_bimbingan.dependencies import get_current_dosen, get_db, require_roles
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.schemas.availability import (
    AvailabilityCreate,
    AvailabilityRead,
    AvailabilityToggle,
    AvailabilityUpdate,
)
from siap_bimbingan.schemas.common import MessageResponse
from siap_bimbingan.schemas.dashboard import DosenDashboard
from siap_bimbingan.schemas.guidance import (
    NoteCreate,
    NoteRead,
    SessionApprove,
    SessionList,
    SessionOfferCreate,
    SessionRead,
    SessionReject,
)
from siap_bimbingan.schemas.progress import StudentProgress, StudentProgressDetail
from siap_bimbingan.schemas.schedule import ScheduleCreate, ScheduleRead, ScheduleUpdate
from siap_bimbingan.services.dashboard_service import get_dosen_dashboard
from siap_bimbingan.services.progress_service import (
    build_student_progress,
    get_period_boundaries,
    get_supervised_students_progress,
)
from siap_bimbingan.utils.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Role, SessionStatus

# Access Control: DOSEN only
# - A dosen manages only their own schedules and availability
# - Sessions are visible to the booked dosen and the project's supervisors

router = APIRouter(
    prefix="/dosen",
    tags=["dosen"],
    dependencies=[Depends(require_roles(Role.DOSEN))],
    responses={404: {"description": "Not found"}},
)


# Dashboard


@router.get("/dashboard", response_model=DosenDashboard)
def dashboard_endpoint(
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return get_dosen_dashboard(db, dosen)


# Teaching schedules


@router.get("/schedules", response_model=List[ScheduleRead])
def read_schedules_endpoint(
    day_of_week: Optional[int] = Query(None, alias="dayOfWeek", ge=0, le=6),
    semester: Optional[str] = None,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return get_schedules(db, dosen.user_id, day_of_week=day_of_week, semester=semester)


@router.post("/schedules", response_model=ScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule_endpoint(
    schedule: ScheduleCreate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """
    Add a teaching schedule entry.

    Raises:
        ScheduleConflictError: 400 with the overlapping entries
    """
    return create_schedule(db, dosen.user_id, schedule)


@router.get("/schedules/{schedule_id}", response_model=ScheduleRead)
def read_schedule_endpoint(
    schedule_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return get_schedule(db, dosen.user_id, schedule_id)


@router.put("/schedules/{schedule_id}", response_model=ScheduleRead)
def update_schedule_endpoint(
    schedule_id: int,
    schedule: ScheduleUpdate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return update_schedule(db, dosen.user_id, schedule_id, schedule)


@router.delete("/schedules/{schedule_id}", response_model=MessageResponse)
def delete_schedule_endpoint(
    schedule_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    delete_schedule(db, dosen.user_id, schedule_id)
    return {"message": "Schedule deleted successfully"}


# Availability


@router.get("/availabilities", response_model=List[AvailabilityRead])
def read_availabilities_endpoint(
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return get_availabilities(db, dosen.dosen_id)


@router.post(
    "/availabilities", response_model=AvailabilityRead, status_code=status.HTTP_201_CREATED
)
def create_availability_endpoint(
    availability: AvailabilityCreate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """Open a recurring (weekday) or one-off (date) guidance slot."""
    return create_availability(db, dosen.dosen_id, availability)


@router.get("/availabilities/{availability_id}", response_model=AvailabilityRead)
def read_availability_endpoint(
    availability_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return get_availability(db, dosen.dosen_id, availability_id)


@router.put("/availabilities/{availability_id}", response_model=AvailabilityRead)
def update_availability_endpoint(
    availability_id: int,
    availability: AvailabilityUpdate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return update_availability(db, dosen.dosen_id, availability_id, availability)


@router.patch("/availabilities/{availability_id}/toggle", response_model=AvailabilityRead)
def toggle_availability_endpoint(
    availability_id: int,
    toggle: AvailabilityToggle,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return set_availability_active(db, dosen.dosen_id, availability_id, toggle.is_active)


@router.delete("/availabilities/{availability_id}", response_model=MessageResponse)
def delete_availability_endpoint(
    availability_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    delete_availability(db, dosen.dosen_id, availability_id)
    return {"message": "Availability deleted successfully"}


# Guidance sessions


@router.get("/sessions", response_model=SessionList)
def read_sessions_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    scheduled_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """Sessions booked with the current dosen, filterable by status and date."""
    return get_dosen_sessions(
        db,
        dosen.dosen_id,
        page=page,
        limit=limit,
        status_filter=status_filter,
        scheduled_date=scheduled_date,
    )


@router.post("/sessions/offer", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def offer_session_endpoint(
    offer: SessionOfferCreate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """
    Offer a session to a supervised student; it stays OFFERED until the
    student accepts or declines.
    """
    session = offer_session(db, dosen, dosen.user_id, offer)
    return session_to_dict(db, session)


@router.get("/sessions/{session_id}", response_model=SessionRead)
def read_session_endpoint(
    session_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    return session_to_dict(db, get_session_for_dosen(db, dosen.dosen_id, session_id))


@router.put("/sessions/{session_id}/approve", response_model=SessionRead)
def approve_session_endpoint(
    session_id: int,
    body: Optional[SessionApprove] = None,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """Approve a PENDING request, optionally setting its location."""
    session = approve_session(
        db, dosen, session_id, location=body.location if body else None
    )
    return session_to_dict(db, session)


@router.put("/sessions/{session_id}/reject", response_model=SessionRead)
def reject_session_endpoint(
    session_id: int,
    body: Optional[SessionReject] = None,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    session = reject_session(db, dosen, session_id, reason=body.reason if body else None)
    return session_to_dict(db, session)


@router.put("/sessions/{session_id}/complete", response_model=SessionRead)
def complete_session_endpoint(
    session_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """Mark an APPROVED session as held; only completed sessions count toward progress."""
    return session_to_dict(db, complete_session(db, dosen, session_id))


@router.post(
    "/sessions/{session_id}/notes", response_model=NoteRead, status_code=status.HTTP_201_CREATED
)
def add_note_endpoint(
    session_id: int,
    note: NoteCreate,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    db_note = add_note(db, dosen, session_id, note)
    return note_to_dict(db_note, dosen.nama)


# Supervised students


@router.get("/students", response_model=List[StudentProgress])
def read_students_endpoint(
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """Every student the dosen supervises, with guidance progress."""
    return get_supervised_students_progress(db, dosen.dosen_id)


@router.get("/students/{mahasiswa_id}/progress", response_model=StudentProgressDetail)
def read_student_progress_endpoint(
    mahasiswa_id: int,
    db: Session = Depends(get_db),
    dosen: Dosen = Depends(get_current_dosen),
):
    """
    Progress of one supervised student, including their completed sessions.

    Raises:
        HTTPException: 404 if the student has no active project supervised
            by the current dosen
    """
    mahasiswa = db.get(Mahasiswa, mahasiswa_id)
    project = get_active_project(db, mahasiswa_id) if mahasiswa else None
    if project is None or not is_supervisor(db, project.thesis_project_id, dosen.dosen_id):
        raise HTTPException(
            status_code=404,
            detail=f"Supervised student with ID {mahasiswa_id} not found",
        )

    uts_date, uas_date = get_period_boundaries(db)
    return build_student_progress(
        db, project, mahasiswa, uts_date, uas_date, include_sessions=True
    )
