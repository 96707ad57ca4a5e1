from siap_bimbingan.services.conflict_service import find_conflicts

EXISTING = [
    {"id": 1, "start_time": "08:00", "end_time": "09:40"},
    {"id": 2, "start_time": "10:00", "end_time": "11:00"},
    {"id": 3, "start_time": "13:00", "end_time": "15:00"},
]


def ids(entries):
    return [entry["id"] for entry in entries]


def test_partial_overlap_is_reported():
    assert ids(find_conflicts("10:30", "11:30", EXISTING)) == [2]


def test_touching_ranges_do_not_conflict():
    assert find_conflicts("09:40", "10:00", EXISTING) == []
    assert find_conflicts("11:00", "13:00", EXISTING) == []


def test_containment_in_both_directions():
    assert ids(find_conflicts("13:30", "14:00", EXISTING)) == [3]
    assert ids(find_conflicts("07:00", "12:00", EXISTING)) == [1, 2]


def test_empty_range_conflicts_with_nothing():
    assert find_conflicts("10:30", "10:30", EXISTING) == []


def test_excluded_entry_is_skipped():
    assert find_conflicts("10:30", "11:30", EXISTING, exclude_id=2) == []


def test_objects_and_custom_id_field():
    class Entry:
        def __init__(self, schedule_id, start_time, end_time):
            self.schedule_id = schedule_id
            self.start_time = start_time
            self.end_time = end_time

    entries = [Entry(7, "10:00", "11:00"), Entry(8, "11:00", "12:00")]
    found = find_conflicts("10:30", "11:30", entries, exclude_id=7, id_field="schedule_id")
    assert [entry.schedule_id for entry in found] == [8]
