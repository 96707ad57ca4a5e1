# siap_bimbingan/schemas/room.py
from typing import Optional

from pydantic import Field

from siap_bimbingan.schemas.common import CamelModel


class RoomBase(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    building: str = Field(min_length=1, max_length=100)
    capacity: Optional[int] = Field(default=None, ge=1)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    building: Optional[str] = Field(default=None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class RoomResponse(RoomBase):
    room_id: int
    is_active: bool
