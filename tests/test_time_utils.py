from datetime import date

import pytest

from siap_bimbingan.utils.time_utils import (
    calculate_duration,
    day_of_week,
    is_time_overlap,
    is_valid_time_string,
    minutes_to_time,
    time_to_minutes,
)


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("08:30") == 510
    assert time_to_minutes("23:59") == 1439


@pytest.mark.parametrize(
    "value", ["8:30", "24:00", "12:60", "1230", "", None, "10:00\n", "\u0661\u0660:\u0660\u0660"]
)
def test_invalid_time_strings(value):
    assert not is_valid_time_string(value)


def test_time_to_minutes_rejects_invalid_input():
    with pytest.raises(ValueError):
        time_to_minutes("25:00")


def test_minutes_to_time():
    assert minutes_to_time(510) == "08:30"
    with pytest.raises(ValueError):
        minutes_to_time(24 * 60)


def test_calculate_duration():
    assert calculate_duration("10:00", "11:40") == 100
    assert calculate_duration("11:00", "10:00") == -60


@pytest.mark.parametrize(
    "first, second, expected",
    [
        (("10:00", "11:00"), ("10:30", "11:30"), True),
        (("10:00", "11:00"), ("11:00", "12:00"), False),
        (("10:00", "12:00"), ("10:30", "11:00"), True),
        (("10:00", "11:00"), ("09:00", "10:00"), False),
        (("10:00", "10:00"), ("09:00", "11:00"), False),
    ],
)
def test_is_time_overlap(first, second, expected):
    assert is_time_overlap(*first, *second) is expected
    assert is_time_overlap(*second, *first) is expected


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2024, 9, 1)) == 0  # Sunday
    assert day_of_week(date(2024, 9, 3)) == 2
    assert day_of_week(date(2024, 9, 7)) == 6
