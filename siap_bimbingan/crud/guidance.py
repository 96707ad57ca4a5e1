"""
Guidance session lifecycle: requests, offers, status transitions and notes.

Every status change goes through ``next_status`` and is written with a
conditional UPDATE on the expected current status, so of two concurrent
transitions on the same session only one succeeds; the other gets 409.
"""
from datetime import date
from typing import Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import func, update
from sqlmodel import Session, select

from siap_bimbingan.crud.availability import slot_applies_on
from siap_bimbingan.crud.thesis import get_active_project, is_supervisor
from siap_bimbingan.models.availability import AvailabilitySlot
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceNote, GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.thesis_project import ThesisProject
from siap_bimbingan.schemas.guidance import (
    NoteCreate,
    SessionOfferCreate,
    SessionRequestCreate,
    SessionRequestUpdate,
)
from siap_bimbingan.services.conflict_service import ensure_session_slot_free
from siap_bimbingan.services.guidance_workflow import can_add_note, next_status
from siap_bimbingan.services.notification_service import notify
from siap_bimbingan.utils.constants import NotificationType, Role, SessionStatus
from siap_bimbingan.utils.time_utils import get_indonesia_date, get_indonesia_time

logger = logging.getLogger(__name__)


def note_to_dict(note: GuidanceNote, dosen_nama: Optional[str] = None) -> dict:
    return {
        "note_id": note.note_id,
        "session_id": note.session_id,
        "dosen_id": note.dosen_id,
        "dosen_nama": dosen_nama,
        "content": note.content,
        "tasks": note.tasks,
        "created_at": note.created_at,
    }


def session_to_dict(db: Session, session: GuidanceSession) -> dict:
    """Flatten a session with its advisor, student, project and notes."""
    project = db.get(ThesisProject, session.thesis_project_id)
    mahasiswa = db.get(Mahasiswa, project.mahasiswa_id) if project else None
    dosen = db.get(Dosen, session.dosen_id)

    notes = []
    for note in session.notes:
        author = db.get(Dosen, note.dosen_id)
        notes.append(note_to_dict(note, author.nama if author else None))

    return {
        "session_id": session.session_id,
        "thesis_project_id": session.thesis_project_id,
        "dosen_id": session.dosen_id,
        "dosen_nama": dosen.nama if dosen else None,
        "mahasiswa_id": mahasiswa.mahasiswa_id if mahasiswa else None,
        "mahasiswa_nama": mahasiswa.nama if mahasiswa else None,
        "npm": mahasiswa.npm if mahasiswa else None,
        "judul": project.judul if project else None,
        "tipe": project.tipe if project else None,
        "availability_id": session.availability_id,
        "scheduled_date": session.scheduled_date,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "location": session.location,
        "status": session.status,
        "agenda": session.agenda,
        "reason": session.reason,
        "created_at": session.created_at,
        "notes": notes,
    }


def _ensure_not_past(scheduled_date: date) -> None:
    if scheduled_date < get_indonesia_date():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Scheduled date cannot be in the past",
        )


def _require_active_project(db: Session, mahasiswa_id: int) -> ThesisProject:
    project = get_active_project(db, mahasiswa_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mahasiswa has no active thesis project",
        )
    return project


def _paginate_sessions(db: Session, query, count_query, page: int, limit: int) -> dict:
    total = db.exec(count_query).one()
    sessions = db.exec(
        query.order_by(GuidanceSession.scheduled_date.desc(), GuidanceSession.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return {
        "sessions": [session_to_dict(db, s) for s in sessions],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit if limit else 0,
        },
    }


def get_dosen_sessions(
    db: Session,
    dosen_id: int,
    page: int = 1,
    limit: int = 10,
    status_filter: Optional[SessionStatus] = None,
    scheduled_date: Optional[date] = None,
) -> dict:
    """
    Sessions booked with the dosen, newest date first.

    Returns:
        dict: ``sessions`` and ``pagination``
    """
    filters = [GuidanceSession.dosen_id == dosen_id]
    if status_filter is not None:
        filters.append(GuidanceSession.status == SessionStatus(status_filter).value)
    if scheduled_date is not None:
        filters.append(GuidanceSession.scheduled_date == scheduled_date)

    query = select(GuidanceSession).where(*filters)
    count_query = select(func.count()).select_from(GuidanceSession).where(*filters)
    return _paginate_sessions(db, query, count_query, page, limit)


def get_mahasiswa_sessions(
    db: Session,
    mahasiswa_id: int,
    page: int = 1,
    limit: int = 10,
    status_filter: Optional[SessionStatus] = None,
) -> dict:
    """Sessions across all of the mahasiswa's thesis projects."""
    filters = [ThesisProject.mahasiswa_id == mahasiswa_id]
    if status_filter is not None:
        filters.append(GuidanceSession.status == SessionStatus(status_filter).value)

    query = (
        select(GuidanceSession)
        .join(ThesisProject, GuidanceSession.thesis_project_id == ThesisProject.thesis_project_id)
        .where(*filters)
    )
    count_query = (
        select(func.count())
        .select_from(GuidanceSession)
        .join(ThesisProject, GuidanceSession.thesis_project_id == ThesisProject.thesis_project_id)
        .where(*filters)
    )
    return _paginate_sessions(db, query, count_query, page, limit)


def _get_session(db: Session, session_id: int) -> GuidanceSession:
    session = db.get(GuidanceSession, session_id)
    if session is None:
        raise HTTPException(
            status_code=404, detail=f"Guidance session with ID {session_id} not found"
        )
    return session


def get_session_for_dosen(db: Session, dosen_id: int, session_id: int) -> GuidanceSession:
    """
    A session is visible to its own dosen and to every supervisor of its
    thesis project; anyone else gets 404.
    """
    session = _get_session(db, session_id)
    if session.dosen_id != dosen_id and not is_supervisor(db, session.thesis_project_id, dosen_id):
        raise HTTPException(
            status_code=404, detail=f"Guidance session with ID {session_id} not found"
        )
    return session


def get_session_for_mahasiswa(db: Session, mahasiswa_id: int, session_id: int) -> GuidanceSession:
    session = _get_session(db, session_id)
    project = db.get(ThesisProject, session.thesis_project_id)
    if project is None or project.mahasiswa_id != mahasiswa_id:
        raise HTTPException(
            status_code=404, detail=f"Guidance session with ID {session_id} not found"
        )
    return session


def request_session(
    db: Session, mahasiswa: Mahasiswa, user_id: int, data: SessionRequestCreate
) -> GuidanceSession:
    """
    Mahasiswa requests a session in one of a supervisor's availability slots.

    The session takes the slot's time range and location and starts PENDING.

    Args:
        db (Session): Active database session
        mahasiswa (Mahasiswa): Requesting student
        user_id (int): User id of the requester, stored as ``created_by``
        data (SessionRequestCreate): Slot id, date and agenda

    Returns:
        GuidanceSession: The new PENDING session

    Raises:
        HTTPException: 400 without an active project, for a past date or a
            slot that does not apply on the date; 403 if the slot's dosen is
            not a supervisor; 404 if the slot does not exist
        ScheduleConflictError: if the slot collides with either schedule or
            a live session of either party
    """
    project = _require_active_project(db, mahasiswa.mahasiswa_id)
    _ensure_not_past(data.scheduled_date)

    slot = db.get(AvailabilitySlot, data.availability_id)
    if slot is None:
        raise HTTPException(
            status_code=404,
            detail=f"Availability with ID {data.availability_id} not found",
        )
    if not is_supervisor(db, project.thesis_project_id, slot.dosen_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only request guidance from your own supervisors",
        )
    if not slot_applies_on(slot, data.scheduled_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The selected slot is not available on this date",
        )

    dosen = db.get(Dosen, slot.dosen_id)
    ensure_session_slot_free(
        db, dosen, mahasiswa, data.scheduled_date, slot.start_time, slot.end_time
    )

    session = GuidanceSession(
        thesis_project_id=project.thesis_project_id,
        dosen_id=dosen.dosen_id,
        availability_id=slot.availability_id,
        scheduled_date=data.scheduled_date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        location=slot.location or "TBD",
        status=SessionStatus.PENDING.value,
        agenda=data.agenda,
        created_by=user_id,
        created_at=get_indonesia_time(),
        updated_at=get_indonesia_time(),
    )
    db.add(session)
    db.flush()

    notify(
        db,
        dosen.user_id,
        NotificationType.SESSION_REQUESTED,
        "New guidance request",
        f"{mahasiswa.nama} requested guidance on {data.scheduled_date} {slot.start_time}",
        link=f"/dosen/sessions/{session.session_id}",
    )
    db.commit()
    db.refresh(session)
    logger.info(f"Session {session.session_id} requested by mahasiswa {mahasiswa.mahasiswa_id}")
    return session


def offer_session(
    db: Session, dosen: Dosen, user_id: int, data: SessionOfferCreate
) -> GuidanceSession:
    """
    Dosen offers a session to one of the students they supervise.

    Raises:
        HTTPException: 404 for an unknown mahasiswa, 400 without an active
            project or for a past date, 403 if the dosen is not a supervisor
        ScheduleConflictError: on any overlap
    """
    mahasiswa = db.get(Mahasiswa, data.mahasiswa_id)
    if mahasiswa is None:
        raise HTTPException(
            status_code=404, detail=f"Mahasiswa with ID {data.mahasiswa_id} not found"
        )
    project = _require_active_project(db, mahasiswa.mahasiswa_id)
    if not is_supervisor(db, project.thesis_project_id, dosen.dosen_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only offer guidance to students you supervise",
        )
    _ensure_not_past(data.scheduled_date)

    ensure_session_slot_free(
        db, dosen, mahasiswa, data.scheduled_date, data.start_time, data.end_time
    )

    session = GuidanceSession(
        thesis_project_id=project.thesis_project_id,
        dosen_id=dosen.dosen_id,
        scheduled_date=data.scheduled_date,
        start_time=data.start_time,
        end_time=data.end_time,
        location=data.location,
        status=SessionStatus.OFFERED.value,
        agenda=data.agenda,
        created_by=user_id,
        created_at=get_indonesia_time(),
        updated_at=get_indonesia_time(),
    )
    db.add(session)
    db.flush()

    notify(
        db,
        mahasiswa.user_id,
        NotificationType.SESSION_OFFERED,
        "Guidance session offered",
        f"{dosen.nama} offered guidance on {data.scheduled_date} {data.start_time}",
        link=f"/mahasiswa/sessions/{session.session_id}",
    )
    db.commit()
    db.refresh(session)
    logger.info(f"Session {session.session_id} offered by dosen {dosen.dosen_id}")
    return session


def update_session_request(
    db: Session, mahasiswa: Mahasiswa, session_id: int, data: SessionRequestUpdate
) -> GuidanceSession:
    """
    Edit the slot, date or agenda of the mahasiswa's own PENDING request.

    A request always sits in one of a supervisor's availability slots, so
    moving it means picking a slot (the current one by default) that applies
    on the new date. The session takes that slot's times and location and is
    conflict-checked again, ignoring itself.

    Raises:
        HTTPException: 400 if the session is not PENDING, the date is in the
            past or the slot does not apply on it; 403 if the slot's dosen
            is not a supervisor; 404 for an unknown slot
        ScheduleConflictError: on any overlap
    """
    session = get_session_for_mahasiswa(db, mahasiswa.mahasiswa_id, session_id)
    if session.status != SessionStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only PENDING requests can be edited, this session is {session.status}",
        )

    changes = data.model_dump(exclude_unset=True)
    availability_id = changes.get("availability_id") or session.availability_id
    scheduled_date = changes.get("scheduled_date") or session.scheduled_date

    if "scheduled_date" in changes:
        _ensure_not_past(scheduled_date)

    slot = db.get(AvailabilitySlot, availability_id) if availability_id else None
    if slot is None:
        raise HTTPException(
            status_code=404,
            detail=f"Availability with ID {availability_id} not found",
        )
    if not is_supervisor(db, session.thesis_project_id, slot.dosen_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only request guidance from your own supervisors",
        )
    if not slot_applies_on(slot, scheduled_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The selected slot is not available on this date",
        )

    dosen = db.get(Dosen, slot.dosen_id)
    ensure_session_slot_free(
        db, dosen, mahasiswa, scheduled_date, slot.start_time, slot.end_time,
        exclude_session_id=session.session_id,
    )

    session.dosen_id = dosen.dosen_id
    session.availability_id = slot.availability_id
    session.scheduled_date = scheduled_date
    session.start_time = slot.start_time
    session.end_time = slot.end_time
    session.location = slot.location or "TBD"
    if "agenda" in changes:
        session.agenda = changes["agenda"]
    session.updated_at = get_indonesia_time()
    db.add(session)

    notify(
        db,
        dosen.user_id,
        NotificationType.SESSION_UPDATED,
        "Guidance request updated",
        f"{mahasiswa.nama} moved the request to {scheduled_date} {slot.start_time}",
        link=f"/dosen/sessions/{session.session_id}",
    )
    db.commit()
    db.refresh(session)
    return session


def _apply_transition(
    db: Session,
    session: GuidanceSession,
    action: str,
    actor_role: Role,
    reason: Optional[str] = None,
    **values,
) -> SessionStatus:
    """
    Persist ``action`` on ``session`` with a conditional update.

    Raises:
        WorkflowError: if the state machine refuses the action
        HTTPException: 409 if the status changed concurrently
    """
    current = SessionStatus(session.status)
    target = next_status(current, action, actor_role, reason=reason)

    if reason is not None:
        values["reason"] = reason

    result = db.connection().execute(
        update(GuidanceSession)
        .where(
            GuidanceSession.session_id == session.session_id,
            GuidanceSession.status == current.value,
        )
        .values(status=target.value, updated_at=get_indonesia_time(), **values)
    )
    if result.rowcount == 0:
        db.rollback()
        logger.warning(
            f"Session {session.session_id} {action} lost a race, status is no longer {current.value}"
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session status was changed by another request, reload and try again",
        )

    logger.info(f"Session {session.session_id}: {current.value} -> {target.value} ({action})")
    return target


def _participants(db: Session, session: GuidanceSession):
    project = db.get(ThesisProject, session.thesis_project_id)
    return db.get(Dosen, session.dosen_id), db.get(Mahasiswa, project.mahasiswa_id)


def _require_own_session(session: GuidanceSession, dosen: Dosen) -> None:
    if session.dosen_id != dosen.dosen_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the advisor this session is booked with can do this",
        )


def _finish(db: Session, session: GuidanceSession) -> GuidanceSession:
    db.commit()
    db.refresh(session)
    return session


def approve_session(
    db: Session, dosen: Dosen, session_id: int, location: Optional[str] = None
) -> GuidanceSession:
    session = get_session_for_dosen(db, dosen.dosen_id, session_id)
    _require_own_session(session, dosen)
    _, mahasiswa = _participants(db, session)

    if session.status == SessionStatus.PENDING.value:
        ensure_session_slot_free(
            db, dosen, mahasiswa, session.scheduled_date, session.start_time, session.end_time,
            exclude_session_id=session.session_id,
        )

    values = {"location": location} if location else {}
    _apply_transition(db, session, "approve", Role.DOSEN, **values)
    notify(
        db,
        mahasiswa.user_id,
        NotificationType.SESSION_APPROVED,
        "Guidance request approved",
        f"{dosen.nama} approved your guidance on {session.scheduled_date} {session.start_time}",
        link=f"/mahasiswa/sessions/{session.session_id}",
    )
    return _finish(db, session)


def reject_session(
    db: Session, dosen: Dosen, session_id: int, reason: Optional[str] = None
) -> GuidanceSession:
    session = get_session_for_dosen(db, dosen.dosen_id, session_id)
    _require_own_session(session, dosen)
    _, mahasiswa = _participants(db, session)

    _apply_transition(db, session, "reject", Role.DOSEN, reason=reason)
    notify(
        db,
        mahasiswa.user_id,
        NotificationType.SESSION_REJECTED,
        "Guidance request rejected",
        f"{dosen.nama} rejected your guidance request"
        + (f": {reason}" if reason else ""),
        link=f"/mahasiswa/sessions/{session.session_id}",
    )
    return _finish(db, session)


def complete_session(db: Session, dosen: Dosen, session_id: int) -> GuidanceSession:
    session = get_session_for_dosen(db, dosen.dosen_id, session_id)
    _require_own_session(session, dosen)
    _, mahasiswa = _participants(db, session)

    _apply_transition(db, session, "complete", Role.DOSEN)
    notify(
        db,
        mahasiswa.user_id,
        NotificationType.SESSION_COMPLETED,
        "Guidance session completed",
        f"Your guidance on {session.scheduled_date} with {dosen.nama} was marked completed",
        link=f"/mahasiswa/sessions/{session.session_id}",
    )
    return _finish(db, session)


def accept_session(db: Session, mahasiswa: Mahasiswa, session_id: int) -> GuidanceSession:
    """Mahasiswa accepts an OFFERED session after a fresh conflict check."""
    session = get_session_for_mahasiswa(db, mahasiswa.mahasiswa_id, session_id)
    dosen, _ = _participants(db, session)

    if session.status == SessionStatus.OFFERED.value:
        ensure_session_slot_free(
            db, dosen, mahasiswa, session.scheduled_date, session.start_time, session.end_time,
            exclude_session_id=session.session_id,
        )

    _apply_transition(db, session, "accept", Role.MAHASISWA)
    notify(
        db,
        dosen.user_id,
        NotificationType.SESSION_ACCEPTED,
        "Guidance offer accepted",
        f"{mahasiswa.nama} accepted the guidance on {session.scheduled_date} {session.start_time}",
        link=f"/dosen/sessions/{session.session_id}",
    )
    return _finish(db, session)


def decline_session(
    db: Session, mahasiswa: Mahasiswa, session_id: int, reason: str
) -> GuidanceSession:
    session = get_session_for_mahasiswa(db, mahasiswa.mahasiswa_id, session_id)
    dosen, _ = _participants(db, session)

    _apply_transition(db, session, "decline", Role.MAHASISWA, reason=reason)
    notify(
        db,
        dosen.user_id,
        NotificationType.SESSION_DECLINED,
        "Guidance offer declined",
        f"{mahasiswa.nama} declined the guidance on {session.scheduled_date}: {reason}",
        link=f"/dosen/sessions/{session.session_id}",
    )
    return _finish(db, session)


def cancel_session(db: Session, mahasiswa: Mahasiswa, session_id: int) -> GuidanceSession:
    session = get_session_for_mahasiswa(db, mahasiswa.mahasiswa_id, session_id)
    dosen, _ = _participants(db, session)

    _apply_transition(db, session, "cancel", Role.MAHASISWA)
    notify(
        db,
        dosen.user_id,
        NotificationType.SESSION_CANCELLED,
        "Guidance session cancelled",
        f"{mahasiswa.nama} cancelled the guidance on {session.scheduled_date} {session.start_time}",
        link=f"/dosen/sessions/{session.session_id}",
    )
    return _finish(db, session)


def add_note(db: Session, dosen: Dosen, session_id: int, note: NoteCreate) -> GuidanceNote:
    """
    Append a note to an APPROVED or COMPLETED session.

    Only a supervisor of the session's thesis project may write notes, and
    writing one leaves the session status unchanged.

    Raises:
        HTTPException: 403 if the dosen does not supervise the project,
            400 if the session is in any other status
    """
    session = _get_session(db, session_id)
    if not is_supervisor(db, session.thesis_project_id, dosen.dosen_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a supervisor of this thesis can add notes",
        )
    if not can_add_note(session.status):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Notes can only be added to APPROVED or COMPLETED sessions, this session is {session.status}",
        )

    db_note = GuidanceNote(
        session_id=session.session_id,
        dosen_id=dosen.dosen_id,
        content=note.content,
        tasks=note.tasks,
        created_at=get_indonesia_time(),
    )
    db.add(db_note)

    _, mahasiswa = _participants(db, session)
    notify(
        db,
        mahasiswa.user_id,
        NotificationType.NOTE_ADDED,
        "New guidance note",
        f"{dosen.nama} added a note to your guidance on {session.scheduled_date}",
        link=f"/mahasiswa/sessions/{session.session_id}",
    )
    db.commit()
    db.refresh(db_note)
    return db_note
