import re
from datetime import date, datetime, timedelta, timezone

from siap_bimbingan.utils.constants import TIME_PATTERN

indonesia_tz = timezone(timedelta(hours=7))

_time_re = re.compile(TIME_PATTERN)


def get_indonesia_time():
    return datetime.now(indonesia_tz)


def get_indonesia_date():
    return datetime.now(indonesia_tz).date()


def is_valid_time_string(value: str) -> bool:
    """Check a zero-padded 24-hour ``HH:MM`` string."""
    return isinstance(value, str) and _time_re.fullmatch(value) is not None


def time_to_minutes(value: str) -> int:
    """
    Convert an ``HH:MM`` string into minutes since midnight.

    Raises:
        ValueError: if the string is not a valid zero-padded 24-hour time
    """
    if not is_valid_time_string(value):
        raise ValueError(f"Invalid time string: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    if minutes < 0 or minutes >= 24 * 60:
        raise ValueError(f"Minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_duration(start_time: str, end_time: str) -> int:
    """Duration in minutes; negative when end is before start."""
    return time_to_minutes(end_time) - time_to_minutes(start_time)


def is_time_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """
    Check whether two half-open ranges [start1, end1) and [start2, end2) overlap.

    Touching endpoints do not overlap, and an empty range (start >= end)
    overlaps nothing.
    """
    s1, e1 = time_to_minutes(start1), time_to_minutes(end1)
    s2, e2 = time_to_minutes(start2), time_to_minutes(end2)

    if s1 >= e1 or s2 >= e2:
        return False

    return s1 < e2 and e1 > s2


def day_of_week(value: date) -> int:
    """Day index with Sunday as 0 and Saturday as 6."""
    return (value.weekday() + 1) % 7
