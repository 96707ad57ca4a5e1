from datetime import date
from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlmodel import Session, select

from siap_bimbingan.models.availability import AvailabilitySlot
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.schemas.availability import AvailabilityCreate, AvailabilityUpdate
from siap_bimbingan.services.conflict_service import collect_session_conflicts
from siap_bimbingan.utils.time_utils import day_of_week, get_indonesia_time

logger = logging.getLogger(__name__)


def create_availability(db: Session, dosen_id: int, availability: AvailabilityCreate) -> AvailabilitySlot:
    """
    Create an availability slot for a dosen.

    Recurring slots keep only their weekday, one-off slots only their date.
    """
    data = availability.model_dump()
    if data["is_recurring"]:
        data["specific_date"] = None
    else:
        data["day_of_week"] = None

    db_availability = AvailabilitySlot(
        dosen_id=dosen_id,
        **data,
        created_at=get_indonesia_time(),
    )
    db.add(db_availability)
    db.commit()
    db.refresh(db_availability)

    return db_availability


def get_availabilities(
    db: Session, dosen_id: int, active_only: bool = False
) -> List[AvailabilitySlot]:
    query = select(AvailabilitySlot).where(AvailabilitySlot.dosen_id == dosen_id)
    if active_only:
        query = query.where(AvailabilitySlot.is_active == True)  # noqa: E712
    query = query.order_by(
        AvailabilitySlot.is_recurring.desc(),
        AvailabilitySlot.day_of_week,
        AvailabilitySlot.specific_date,
        AvailabilitySlot.start_time,
    )
    return list(db.exec(query).all())


def get_availability(db: Session, dosen_id: int, availability_id: int) -> AvailabilitySlot:
    """
    Raises:
        HTTPException: 404 if the slot does not exist or belongs to another dosen
    """
    availability = db.get(AvailabilitySlot, availability_id)
    if availability is None or availability.dosen_id != dosen_id:
        raise HTTPException(
            status_code=404,
            detail=f"Availability with ID {availability_id} not found",
        )
    return availability


def update_availability(
    db: Session, dosen_id: int, availability_id: int, availability: AvailabilityUpdate
) -> AvailabilitySlot:
    """
    Partially update a slot; the merged slot must still be a valid range and
    carry the weekday or date its kind requires.
    """
    db_availability = get_availability(db, dosen_id, availability_id)
    data = availability.model_dump(exclude_unset=True)

    is_recurring = data.get("is_recurring", db_availability.is_recurring)
    start_time = data.get("start_time", db_availability.start_time)
    end_time = data.get("end_time", db_availability.end_time)
    day = data.get("day_of_week", db_availability.day_of_week)
    specific_date = data.get("specific_date", db_availability.specific_date)

    if start_time >= end_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End time must be after start time",
        )
    if is_recurring and day is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Day of week is required for a recurring slot",
        )
    if not is_recurring and specific_date is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Specific date is required for a one-off slot",
        )

    for key, value in data.items():
        setattr(db_availability, key, value)
    if is_recurring:
        db_availability.specific_date = None
    else:
        db_availability.day_of_week = None

    db.add(db_availability)
    db.commit()
    db.refresh(db_availability)
    return db_availability


def set_availability_active(
    db: Session, dosen_id: int, availability_id: int, is_active: bool
) -> AvailabilitySlot:
    db_availability = get_availability(db, dosen_id, availability_id)
    db_availability.is_active = is_active
    db.add(db_availability)
    db.commit()
    db.refresh(db_availability)
    return db_availability


def delete_availability(db: Session, dosen_id: int, availability_id: int) -> None:
    db_availability = get_availability(db, dosen_id, availability_id)
    db.delete(db_availability)
    db.commit()


def slot_applies_on(slot: AvailabilitySlot, on_date: date) -> bool:
    """Whether an active slot can be booked on ``on_date``."""
    if not slot.is_active:
        return False
    if slot.is_recurring:
        return slot.day_of_week == day_of_week(on_date)
    return slot.specific_date == on_date


def get_slots_on_date(db: Session, dosen_id: int, on_date: date) -> List[AvailabilitySlot]:
    return [
        slot
        for slot in get_availabilities(db, dosen_id, active_only=True)
        if slot_applies_on(slot, on_date)
    ]


def get_available_slots(
    db: Session, dosen: Dosen, mahasiswa: Mahasiswa, on_date: date
) -> List[dict]:
    """
    List the dosen's slots for a date, marking each one available or not.

    A slot is unavailable when it collides with the dosen's teaching
    schedule, the mahasiswa's course schedule, or a live session of either.

    Args:
        db (Session): Active database session
        dosen (Dosen): Advisor whose slots are listed
        mahasiswa (Mahasiswa): Student asking, whose schedule is considered
        on_date (date): Requested date

    Returns:
        List[dict]: Entries of the AvailableSlot schema, ordered by start time
    """
    slots = sorted(get_slots_on_date(db, dosen.dosen_id, on_date), key=lambda s: s.start_time)
    result = []
    for slot in slots:
        conflicts = collect_session_conflicts(
            db, dosen, mahasiswa, on_date, slot.start_time, slot.end_time
        )
        result.append(
            {
                "availability_id": slot.availability_id,
                "start_time": slot.start_time,
                "end_time": slot.end_time,
                "location": slot.location,
                "is_available": not conflicts,
            }
        )
    return result
