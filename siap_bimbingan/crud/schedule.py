# siap_bimbingan/crud/schedule.py
from typing import List, Optional
import logging

from fastapi import HTTPException
from sqlmodel import Session, select

from siap_bimbingan.models.schedule import ScheduleEntry
from siap_bimbingan.schemas.schedule import ScheduleCreate, ScheduleUpdate
from siap_bimbingan.services.conflict_service import (
    ScheduleConflictError,
    describe_schedule,
    find_schedule_conflicts,
)
from siap_bimbingan.utils.constants import DAY_NAMES
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)


def _raise_if_conflicting(
    db: Session,
    user_id: int,
    day_of_week: int,
    start_time: str,
    end_time: str,
    exclude_id: Optional[int] = None,
) -> None:
    conflicts = find_schedule_conflicts(
        db, user_id, day_of_week, start_time, end_time, exclude_id=exclude_id
    )
    if conflicts:
        logger.info(
            f"Schedule {DAY_NAMES[day_of_week]} {start_time}-{end_time} of user {user_id} "
            f"overlaps {len(conflicts)} entry(ies)"
        )
        raise ScheduleConflictError(
            "Schedule conflict detected",
            [describe_schedule(entry, "SCHEDULE") for entry in conflicts],
        )


def create_schedule(db: Session, user_id: int, schedule: ScheduleCreate) -> ScheduleEntry:
    """
    Create a schedule entry for its owner after checking for overlaps.

    The new range is compared with the owner's other entries on the same
    weekday; touching ranges (one ends when the next starts) are allowed.

    Args:
        db (Session): Active database session
        user_id (int): Owner of the schedule (dosen or mahasiswa user)
        schedule (ScheduleCreate): Validated schedule data

    Returns:
        ScheduleEntry: Newly created entry

    Raises:
        ScheduleConflictError: if the range overlaps an existing entry
    """
    _raise_if_conflicting(
        db, user_id, schedule.day_of_week, schedule.start_time, schedule.end_time
    )

    db_schedule = ScheduleEntry(
        user_id=user_id,
        **schedule.model_dump(),
        created_at=get_indonesia_time(),
    )
    db.add(db_schedule)
    db.commit()
    db.refresh(db_schedule)

    return db_schedule


def get_schedules(
    db: Session,
    user_id: int,
    day_of_week: Optional[int] = None,
    semester: Optional[str] = None,
) -> List[ScheduleEntry]:
    """List one owner's schedule entries ordered by day and start time."""
    query = select(ScheduleEntry).where(ScheduleEntry.user_id == user_id)

    if day_of_week is not None:
        query = query.where(ScheduleEntry.day_of_week == day_of_week)
    if semester is not None:
        query = query.where(ScheduleEntry.semester == semester)

    query = query.order_by(ScheduleEntry.day_of_week, ScheduleEntry.start_time)
    return list(db.exec(query).all())


def get_schedule(db: Session, user_id: int, schedule_id: int) -> ScheduleEntry:
    """
    Retrieve one schedule entry owned by ``user_id``.

    Entries of other users are reported as missing.

    Raises:
        HTTPException: 404 if no such entry belongs to the user
    """
    schedule = db.get(ScheduleEntry, schedule_id)
    if schedule is None or schedule.user_id != user_id:
        raise HTTPException(
            status_code=404, detail=f"Schedule with ID {schedule_id} not found"
        )
    return schedule


def update_schedule(
    db: Session, user_id: int, schedule_id: int, schedule: ScheduleUpdate
) -> ScheduleEntry:
    """
    Partially update a schedule entry.

    The resulting range is validated and conflict-checked against the
    owner's other entries, never against the entry itself.

    Raises:
        HTTPException: 404 if the entry is missing, 400 if the merged range
            ends before it starts
        ScheduleConflictError: if the new range overlaps another entry
    """
    db_schedule = get_schedule(db, user_id, schedule_id)
    schedule_data = schedule.model_dump(exclude_unset=True)

    day_of_week = schedule_data.get("day_of_week", db_schedule.day_of_week)
    start_time = schedule_data.get("start_time", db_schedule.start_time)
    end_time = schedule_data.get("end_time", db_schedule.end_time)

    if start_time >= end_time:
        raise HTTPException(status_code=400, detail="End time must be after start time")

    _raise_if_conflicting(
        db, user_id, day_of_week, start_time, end_time, exclude_id=schedule_id
    )

    for key, value in schedule_data.items():
        setattr(db_schedule, key, value)

    db.add(db_schedule)
    db.commit()
    db.refresh(db_schedule)

    return db_schedule


def delete_schedule(db: Session, user_id: int, schedule_id: int) -> None:
    db_schedule = get_schedule(db, user_id, schedule_id)
    db.delete(db_schedule)
    db.commit()


def check_schedule_conflict(
    db: Session,
    user_id: int,
    day_of_week: int,
    start_time: str,
    end_time: str,
    exclude_id: Optional[int] = None,
) -> List[ScheduleEntry]:
    """Report the entries a proposed range would collide with, without writing."""
    return find_schedule_conflicts(
        db, user_id, day_of_week, start_time, end_time, exclude_id=exclude_id
    )
