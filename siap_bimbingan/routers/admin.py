from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlmodel import Session

from siap_bimbingan.config import MAX_IMPORT_SIZE
from siap_bimbingan.crud.academic_period import (
    activate_academic_period,
    create_academic_period,
    delete_academic_period,
    get_academic_period,
    get_academic_periods,
    get_active_academic_period,
    update_academic_period,
)
from siap_bimbingan.crud.room import create_room, delete_room, get_room, get_rooms, update_room
from siap_bimbingan.crud.thesis import (
    create_thesis_project,
    delete_thesis_project,
    get_thesis_project,
    get_thesis_projects,
    thesis_to_dict,
)
from siap_bimbingan.crud.user import (
    create_user,
    delete_user,
    get_user,
    get_users,
    reset_password,
    set_user_active,
    update_user,
    user_to_dict,
)
from siap_bimbingan.dependencies import get_db, require_roles
from siap_bimbingan.schemas.academic_period import (
    AcademicPeriodCreate,
    AcademicPeriodRead,
    AcademicPeriodUpdate,
)
from siap_bimbingan.schemas.auth import CurrentUser
from siap_bimbingan.schemas.common import MessageResponse, paginate
from siap_bimbingan.schemas.dashboard import AdminDashboardStats
from siap_bimbingan.schemas.imports import ImportResult
from siap_bimbingan.schemas.progress import MonitoringReport
from siap_bimbingan.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from siap_bimbingan.schemas.thesis import ThesisProjectCreate, ThesisProjectList, ThesisProjectRead
from siap_bimbingan.schemas.user import (
    ResetPasswordRequest,
    UserCreate,
    UserList,
    UserRead,
    UserToggle,
    UserUpdate,
)
from siap_bimbingan.services.dashboard_service import get_admin_stats
from siap_bimbingan.services.import_service import (
    ImportFileError,
    import_schedules,
    import_students,
    import_thesis_projects,
)
from siap_bimbingan.services.progress_service import get_monitoring_report
from siap_bimbingan.utils.constants import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    Role,
    ThesisStatus,
    ThesisType,
)

# Access Control: ADMIN only, enforced router-wide

require_admin = require_roles(Role.ADMIN)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Not found"}},
)


# Users


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(user: UserCreate, db: Session = Depends(get_db)):
    """
    Create a user account together with its dosen or mahasiswa profile.

    Raises:
        HTTPException: 400 if the email, NIP or NPM is already registered
    """
    return user_to_dict(create_user(db, user))


@router.get("/users", response_model=UserList)
def read_users_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    role: Optional[Role] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List users, optionally filtered by role or an email fragment."""
    users, total = get_users(db, page=page, limit=limit, role=role, search=search)
    return paginate([user_to_dict(u) for u in users], total, page, limit)


@router.get("/users/{user_id}", response_model=UserRead)
def read_user_endpoint(user_id: int, db: Session = Depends(get_db)):
    return user_to_dict(get_user(db, user_id))


@router.put("/users/{user_id}", response_model=UserRead)
def update_user_endpoint(user_id: int, user: UserUpdate, db: Session = Depends(get_db)):
    return user_to_dict(update_user(db, user_id, user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(require_admin),
):
    """
    Delete a user and its profile.

    Raises:
        HTTPException: 400 if the admin tries to delete their own account
    """
    delete_user(db, user_id, current_user_id=identity.user_id)
    return {"message": "User deleted successfully"}


@router.patch("/users/{user_id}/toggle", response_model=UserRead)
def toggle_user_endpoint(
    user_id: int,
    toggle: UserToggle,
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(require_admin),
):
    """Activate or deactivate an account; deactivated accounts cannot log in."""
    user = set_user_active(db, user_id, toggle.is_active, current_user_id=identity.user_id)
    return user_to_dict(user)


@router.post("/users/{user_id}/reset-password", response_model=MessageResponse)
def reset_password_endpoint(
    user_id: int, request: ResetPasswordRequest, db: Session = Depends(get_db)
):
    reset_password(db, user_id, request.new_password)
    return {"message": "Password reset successfully"}


# Thesis projects


@router.post(
    "/thesis-projects", response_model=ThesisProjectRead, status_code=status.HTTP_201_CREATED
)
def create_thesis_project_endpoint(
    project: ThesisProjectCreate, db: Session = Depends(get_db)
):
    """Create a thesis project; supervisor order follows ``supervisorIds``."""
    return thesis_to_dict(create_thesis_project(db, project))


@router.get("/thesis-projects", response_model=ThesisProjectList)
def read_thesis_projects_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    semester: Optional[str] = None,
    tipe: Optional[ThesisType] = None,
    status_filter: Optional[ThesisStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    projects, total = get_thesis_projects(
        db,
        page=page,
        limit=limit,
        semester=semester,
        tipe=tipe.value if tipe else None,
        status=status_filter.value if status_filter else None,
    )
    return paginate([thesis_to_dict(p) for p in projects], total, page, limit)


@router.get("/thesis-projects/{thesis_project_id}", response_model=ThesisProjectRead)
def read_thesis_project_endpoint(thesis_project_id: int, db: Session = Depends(get_db)):
    return thesis_to_dict(get_thesis_project(db, thesis_project_id))


@router.delete("/thesis-projects/{thesis_project_id}", response_model=MessageResponse)
def delete_thesis_project_endpoint(thesis_project_id: int, db: Session = Depends(get_db)):
    delete_thesis_project(db, thesis_project_id)
    return {"message": "Thesis project deleted successfully"}


# Academic periods


@router.post(
    "/academic-periods", response_model=AcademicPeriodRead, status_code=status.HTTP_201_CREATED
)
def create_academic_period_endpoint(
    period: AcademicPeriodCreate, db: Session = Depends(get_db)
):
    return create_academic_period(db, period)


@router.get("/academic-periods", response_model=List[AcademicPeriodRead])
def read_academic_periods_endpoint(db: Session = Depends(get_db)):
    return get_academic_periods(db)


@router.get("/academic-periods/active", response_model=Optional[AcademicPeriodRead])
def read_active_academic_period_endpoint(db: Session = Depends(get_db)):
    """The active period, or null when progress falls back to configured dates."""
    return get_active_academic_period(db)


@router.get("/academic-periods/{period_id}", response_model=AcademicPeriodRead)
def read_academic_period_endpoint(period_id: int, db: Session = Depends(get_db)):
    return get_academic_period(db, period_id)


@router.put("/academic-periods/{period_id}", response_model=AcademicPeriodRead)
def update_academic_period_endpoint(
    period_id: int, period: AcademicPeriodUpdate, db: Session = Depends(get_db)
):
    return update_academic_period(db, period_id, period)


@router.patch("/academic-periods/{period_id}/activate", response_model=AcademicPeriodRead)
def activate_academic_period_endpoint(period_id: int, db: Session = Depends(get_db)):
    """Make this the only active period; its UTS/UAS dates drive progress."""
    return activate_academic_period(db, period_id)


@router.delete("/academic-periods/{period_id}", response_model=MessageResponse)
def delete_academic_period_endpoint(period_id: int, db: Session = Depends(get_db)):
    delete_academic_period(db, period_id)
    return {"message": "Academic period deleted successfully"}


# Rooms


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room_endpoint(room: RoomCreate, db: Session = Depends(get_db)):
    return create_room(db, room)


@router.get("/rooms", response_model=List[RoomResponse])
def read_rooms_endpoint(
    name: Optional[str] = None,
    building: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return get_rooms(db, name=name, building=building)


@router.get("/rooms/{room_id}", response_model=RoomResponse)
def read_room_endpoint(room_id: int, db: Session = Depends(get_db)):
    return get_room(db, room_id)


@router.put("/rooms/{room_id}", response_model=RoomResponse)
def update_room_endpoint(room_id: int, room: RoomUpdate, db: Session = Depends(get_db)):
    return update_room(db, room_id, room)


@router.delete("/rooms/{room_id}", response_model=MessageResponse)
def delete_room_endpoint(room_id: int, db: Session = Depends(get_db)):
    delete_room(db, room_id)
    return {"message": "Room deleted successfully"}


# Dashboard and monitoring


@router.get("/dashboard/stats", response_model=AdminDashboardStats)
def dashboard_stats_endpoint(db: Session = Depends(get_db)):
    """User, thesis project and guidance session counts for the admin dashboard."""
    return get_admin_stats(db)


@router.get("/monitoring", response_model=MonitoringReport)
def monitoring_endpoint(
    semester: Optional[str] = None,
    tipe: Optional[ThesisType] = None,
    db: Session = Depends(get_db),
):
    """
    Guidance progress of every active thesis project with summary counts.
    Filterable by semester and thesis type.
    """
    return get_monitoring_report(db, semester=semester, tipe=tipe.value if tipe else None)


@router.get("/monitoring/not-meeting-requirements", response_model=MonitoringReport)
def not_meeting_requirements_endpoint(
    semester: Optional[str] = None,
    tipe: Optional[ThesisType] = None,
    db: Session = Depends(get_db),
):
    """Students who do not yet meet both guidance thresholds."""
    return get_monitoring_report(
        db,
        semester=semester,
        tipe=tipe.value if tipe else None,
        only_not_meeting=True,
    )


# CSV import


async def _read_upload(file: UploadFile) -> bytes:
    if file.filename and not file.filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are supported",
        )
    content = await file.read()
    if len(content) > MAX_IMPORT_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {MAX_IMPORT_SIZE} byte limit",
        )
    return content


@router.post("/import/schedules", response_model=ImportResult)
async def import_schedules_endpoint(
    file: UploadFile = File(...),
    semester: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Import dosen teaching schedules from CSV.

    Each row is validated on its own; invalid rows are reported with their
    row number and do not stop the import.
    """
    content = await _read_upload(file)
    try:
        return import_schedules(db, content, semester=semester)
    except ImportFileError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/import/students", response_model=ImportResult)
async def import_students_endpoint(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Import mahasiswa accounts from CSV (NPM, nama, email, phone, angkatan)."""
    content = await _read_upload(file)
    try:
        return import_students(db, content)
    except ImportFileError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/import/thesis-projects", response_model=ImportResult)
async def import_thesis_projects_endpoint(
    file: UploadFile = File(...),
    semester: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Import thesis projects from CSV (NPM, judul, tipe, NIP pembimbing 1 and 2).
    Existing ACTIVE projects of the same semester are updated.
    """
    content = await _read_upload(file)
    try:
        return import_thesis_projects(db, content, semester=semester)
    except ImportFileError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
