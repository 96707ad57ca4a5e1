from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from siap_bimbingan.crud.room import get_rooms
from siap_bimbingan.crud.schedule import check_schedule_conflict
from siap_bimbingan.dependencies import get_current_user, get_db
from siap_bimbingan.schemas.auth import CurrentUser
from siap_bimbingan.schemas.room import RoomResponse
from siap_bimbingan.schemas.schedule import ConflictCheckRequest, ConflictCheckResponse

# Access Control: any authenticated user

router = APIRouter(
    prefix="/schedules",
    tags=["schedules"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/check-conflict", response_model=ConflictCheckResponse)
def check_conflict_endpoint(
    request: ConflictCheckRequest,
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    """
    Check a proposed range against the current user's own schedule.

    Nothing is written. ``excludeId`` skips the entry being edited.
    """
    conflicts = check_schedule_conflict(
        db,
        identity.user_id,
        request.day_of_week,
        request.start_time,
        request.end_time,
        exclude_id=request.exclude_id,
    )
    return {"has_conflict": bool(conflicts), "conflicts": conflicts}


@router.get("/rooms", response_model=List[RoomResponse])
def read_rooms_endpoint(db: Session = Depends(get_db)):
    """Active rooms, for picking a guidance location."""
    return get_rooms(db, active_only=True)
