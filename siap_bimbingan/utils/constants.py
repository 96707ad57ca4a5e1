from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    DOSEN = "DOSEN"
    MAHASISWA = "MAHASISWA"


class SessionStatus(str, Enum):
    PENDING = "PENDING"
    OFFERED = "OFFERED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DECLINED = "DECLINED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = {
    SessionStatus.COMPLETED,
    SessionStatus.REJECTED,
    SessionStatus.DECLINED,
    SessionStatus.CANCELLED,
}

# Sessions that still occupy a time slot
LIVE_STATUSES = (
    SessionStatus.PENDING.value,
    SessionStatus.OFFERED.value,
    SessionStatus.APPROVED.value,
)


class ThesisType(str, Enum):
    TA1 = "TA1"
    TA2 = "TA2"


class ThesisStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class NotificationType(str, Enum):
    SESSION_REQUESTED = "SESSION_REQUESTED"
    SESSION_OFFERED = "SESSION_OFFERED"
    SESSION_APPROVED = "SESSION_APPROVED"
    SESSION_REJECTED = "SESSION_REJECTED"
    SESSION_ACCEPTED = "SESSION_ACCEPTED"
    SESSION_DECLINED = "SESSION_DECLINED"
    SESSION_UPDATED = "SESSION_UPDATED"
    SESSION_COMPLETED = "SESSION_COMPLETED"
    SESSION_CANCELLED = "SESSION_CANCELLED"
    NOTE_ADDED = "NOTE_ADDED"


# Completed guidance sessions required per bucket
THESIS_REQUIREMENTS = {
    ThesisType.TA1: {"before_uts": 2, "before_uas": 2},
    ThesisType.TA2: {"before_uts": 3, "before_uas": 3},
}

DAY_NAMES = {
    0: "Minggu",
    1: "Senin",
    2: "Selasa",
    3: "Rabu",
    4: "Kamis",
    5: "Jumat",
    6: "Sabtu",
}

TIME_PATTERN = r"([01][0-9]|2[0-3]):([0-5][0-9])"
IDENTIFIER_PATTERN = r"[0-9]{10}"
PASSWORD_MIN_LENGTH = 8

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
