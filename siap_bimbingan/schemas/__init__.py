from .academic_period import AcademicPeriodCreate, AcademicPeriodRead, AcademicPeriodUpdate
from .availability import AvailabilityCreate, AvailabilityRead, AvailabilityUpdate
from .guidance import (
    NoteCreate,
    SessionOfferCreate,
    SessionRead,
    SessionRequestCreate,
    SessionRequestUpdate,
)
from .room import RoomCreate, RoomResponse, RoomUpdate
from .schedule import ScheduleCreate, ScheduleRead, ScheduleUpdate
from .thesis import ThesisProjectCreate, ThesisProjectRead
from .user import UserCreate, UserRead, UserUpdate

__all__ = [
    "AcademicPeriodCreate",
    "AcademicPeriodRead",
    "AcademicPeriodUpdate",
    "AvailabilityCreate",
    "AvailabilityRead",
    "AvailabilityUpdate",
    "NoteCreate",
    "SessionOfferCreate",
    "SessionRead",
    "SessionRequestCreate",
    "SessionRequestUpdate",
    "RoomCreate",
    "RoomResponse",
    "RoomUpdate",
    "ScheduleCreate",
    "ScheduleRead",
    "ScheduleUpdate",
    "ThesisProjectCreate",
    "ThesisProjectRead",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
