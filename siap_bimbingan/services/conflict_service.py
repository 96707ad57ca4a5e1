"""
Time-conflict detection for schedules, availability slots and guidance sessions.

``find_conflicts`` is a pure comparison over candidates the caller already
fetched; the ``get_*`` helpers below fetch the usual candidate sets (one
owner's entries on one weekday, one participant's live sessions on one date).
"""
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional
import logging

from sqlmodel import Session, select

from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.schedule import ScheduleEntry
from siap_bimbingan.models.thesis_project import ThesisProject
from siap_bimbingan.utils.constants import LIVE_STATUSES
from siap_bimbingan.utils.time_utils import day_of_week, is_time_overlap

logger = logging.getLogger(__name__)


class ScheduleConflictError(Exception):
    """A proposed time range overlaps existing entries."""

    def __init__(self, message: str, conflicts: List[dict]):
        super().__init__(message)
        self.message = message
        self.conflicts = conflicts


def _get(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def find_conflicts(
    new_start: str,
    new_end: str,
    existing: Iterable[Any],
    exclude_id: Optional[int] = None,
    id_field: str = "id",
) -> list:
    """
    Return the entries of ``existing`` whose time range overlaps the new one.

    Args:
        new_start: Start of the proposed range (HH:MM)
        new_end: End of the proposed range (HH:MM)
        existing: Objects or mappings with ``start_time`` and ``end_time``,
            already scoped to the same day or date
        exclude_id: Identifier of the record being edited, never reported
        id_field: Name of the identifier attribute on the entries

    Returns:
        list: Overlapping entries in their original order
    """
    conflicts = []
    for entry in existing:
        if exclude_id is not None and _get(entry, id_field) == exclude_id:
            continue
        if is_time_overlap(new_start, new_end, _get(entry, "start_time"), _get(entry, "end_time")):
            conflicts.append(entry)
    return conflicts


def get_schedule_candidates(db: Session, user_id: int, day: int) -> List[ScheduleEntry]:
    query = (
        select(ScheduleEntry)
        .where(ScheduleEntry.user_id == user_id, ScheduleEntry.day_of_week == day)
        .order_by(ScheduleEntry.start_time)
    )
    return list(db.exec(query).all())


def get_dosen_live_sessions(db: Session, dosen_id: int, on_date: date) -> List[GuidanceSession]:
    query = select(GuidanceSession).where(
        GuidanceSession.dosen_id == dosen_id,
        GuidanceSession.scheduled_date == on_date,
        GuidanceSession.status.in_(LIVE_STATUSES),
    )
    return list(db.exec(query).all())


def get_mahasiswa_live_sessions(
    db: Session, mahasiswa_id: int, on_date: date
) -> List[GuidanceSession]:
    query = (
        select(GuidanceSession)
        .join(
            ThesisProject,
            GuidanceSession.thesis_project_id == ThesisProject.thesis_project_id,
        )
        .where(
            ThesisProject.mahasiswa_id == mahasiswa_id,
            GuidanceSession.scheduled_date == on_date,
            GuidanceSession.status.in_(LIVE_STATUSES),
        )
    )
    return list(db.exec(query).all())


def find_schedule_conflicts(
    db: Session,
    user_id: int,
    day: int,
    start_time: str,
    end_time: str,
    exclude_id: Optional[int] = None,
) -> List[ScheduleEntry]:
    candidates = get_schedule_candidates(db, user_id, day)
    return find_conflicts(
        start_time, end_time, candidates, exclude_id=exclude_id, id_field="schedule_id"
    )


def describe_schedule(entry: ScheduleEntry, source: str) -> dict:
    return {
        "source": source,
        "id": entry.schedule_id,
        "startTime": entry.start_time,
        "endTime": entry.end_time,
        "label": entry.course_name,
    }


def describe_session(session: GuidanceSession, source: str) -> dict:
    return {
        "source": source,
        "id": session.session_id,
        "startTime": session.start_time,
        "endTime": session.end_time,
        "label": session.status,
    }


def collect_session_conflicts(
    db: Session,
    dosen: Dosen,
    mahasiswa: Mahasiswa,
    on_date: date,
    start_time: str,
    end_time: str,
    exclude_session_id: Optional[int] = None,
) -> List[dict]:
    """
    Everything a guidance session at the given time would collide with:
    the dosen's teaching schedule and live sessions, and the mahasiswa's
    course schedule and live sessions.
    """
    day = day_of_week(on_date)
    conflicts = []

    for entry in find_conflicts(
        start_time, end_time, get_schedule_candidates(db, dosen.user_id, day)
    ):
        conflicts.append(describe_schedule(entry, "DOSEN_SCHEDULE"))

    for entry in find_conflicts(
        start_time, end_time, get_schedule_candidates(db, mahasiswa.user_id, day)
    ):
        conflicts.append(describe_schedule(entry, "MAHASISWA_SCHEDULE"))

    seen = set()
    for source, sessions in (
        ("DOSEN_SESSION", get_dosen_live_sessions(db, dosen.dosen_id, on_date)),
        ("MAHASISWA_SESSION", get_mahasiswa_live_sessions(db, mahasiswa.mahasiswa_id, on_date)),
    ):
        for session in find_conflicts(
            start_time,
            end_time,
            sessions,
            exclude_id=exclude_session_id,
            id_field="session_id",
        ):
            if session.session_id in seen:
                continue
            seen.add(session.session_id)
            conflicts.append(describe_session(session, source))

    return conflicts


def ensure_session_slot_free(
    db: Session,
    dosen: Dosen,
    mahasiswa: Mahasiswa,
    on_date: date,
    start_time: str,
    end_time: str,
    exclude_session_id: Optional[int] = None,
) -> None:
    """
    Raises:
        ScheduleConflictError: if the slot collides with anything
    """
    conflicts = collect_session_conflicts(
        db, dosen, mahasiswa, on_date, start_time, end_time, exclude_session_id
    )
    if conflicts:
        logger.info(
            f"Session slot {on_date} {start_time}-{end_time} for dosen {dosen.dosen_id} "
            f"and mahasiswa {mahasiswa.mahasiswa_id} has {len(conflicts)} conflict(s)"
        )
        raise ScheduleConflictError("Schedule conflict detected", conflicts)
