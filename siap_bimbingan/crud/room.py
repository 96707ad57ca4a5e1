from typing import List, Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from siap_bimbingan.models.room import Room
from siap_bimbingan.schemas.room import RoomCreate, RoomUpdate


def create_room(db: Session, room: RoomCreate) -> Room:
    """
    Create a new room.

    Args:
        db: Database session for transaction management
        room: Validated room data (name, building, capacity)

    Returns:
        Room: Newly created room, active by default
    """
    db_room = Room(
        name=room.name,
        building=room.building,
        capacity=room.capacity,
        is_active=True,
    )

    db.add(db_room)
    db.commit()
    db.refresh(db_room)

    return db_room


def get_rooms(
    db: Session,
    name: Optional[str] = None,
    building: Optional[str] = None,
    active_only: bool = False,
) -> List[Room]:
    """
    Retrieve rooms with optional name/building filtering.

    Name filter is a case-insensitive partial match.
    """
    query = select(Room)

    if name:
        query = query.where(Room.name.ilike(f"%{name}%"))
    if building:
        query = query.where(Room.building == building)
    if active_only:
        query = query.where(Room.is_active == True)  # noqa: E712

    return list(db.exec(query.order_by(Room.building, Room.name)).all())


def get_room(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=404, detail=f"Room with ID {room_id} not found")
    return room


def update_room(db: Session, room_id: int, room: RoomUpdate) -> Room:
    db_room = get_room(db, room_id)

    room_data = room.model_dump(exclude_unset=True)
    for key, value in room_data.items():
        setattr(db_room, key, value)

    db.add(db_room)
    db.commit()
    db.refresh(db_room)

    return db_room


def delete_room(db: Session, room_id: int) -> None:
    db_room = get_room(db, room_id)
    db.delete(db_room)
    db.commit()
