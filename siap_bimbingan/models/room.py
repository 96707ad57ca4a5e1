# siap_bimbingan/models/room.py
from sqlmodel import SQLModel, Field
from typing import Optional


class Room(SQLModel, table=True):
    room_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    building: str = Field(max_length=100)
    capacity: Optional[int] = Field(default=None)
    is_active: bool = Field(default=True)
