import pytest

from siap_bimbingan.utils.validation import PayloadValidationError, validate_payload


def test_every_invalid_field_is_reported():
    payload = {
        "dayOfWeek": 9,
        "startTime": "25:00",
        "endTime": "10:00",
        "courseName": "",
    }
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_payload("createSchedule", payload)

    errors = exc_info.value.errors
    assert len(errors) == 3
    assert {error["field"] for error in errors} == {"dayOfWeek", "startTime", "courseName"}
    assert "Invalid time format (HH:MM)" in [error["message"] for error in errors]


def test_user_payload_with_three_bad_fields():
    payload = {"email": "bukan-email", "password": "123", "role": "GURU", "nama": "Andi Pratama"}
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_payload("createUser", payload)

    assert [error["field"] for error in exc_info.value.errors] == ["email", "password", "role"]


def test_cross_field_rule():
    payload = {"dayOfWeek": 1, "startTime": "11:00", "endTime": "10:00", "courseName": "Basis Data"}
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_payload("createSchedule", payload)

    assert exc_info.value.errors == [
        {"field": "body", "message": "End time must be after start time"}
    ]


def test_snake_case_input_and_unknown_fields():
    data = validate_payload(
        "createSchedule",
        {
            "day_of_week": 1,
            "start_time": "08:00",
            "end_time": "09:40",
            "course_name": "Pemrograman Web",
            "lecturer": "ignored",
        },
    )
    assert data.day_of_week == 1
    assert data.semester == "Default"
    assert "lecturer" not in data.model_dump()


def test_identifier_must_have_ten_digits():
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_payload("importStudentRow", {"npm": "12345", "nama": "Andi", "email": "a@b.id"})
    assert exc_info.value.errors[0]["message"] == "Must be exactly 10 digits"


def test_unknown_schema_name():
    with pytest.raises(KeyError):
        validate_payload("doesNotExist", {})


def test_trailing_newline_and_non_ascii_digits_are_rejected():
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_payload(
            "createSchedule",
            {"dayOfWeek": 1, "startTime": "10:00\n", "endTime": "11:00", "courseName": "Basis Data"},
        )
    assert exc_info.value.errors == [{"field": "startTime", "message": "Invalid time format (HH:MM)"}]

    for npm in ("2021000001\n", "\u0662\u0660\u0662\u0661\u0660\u0660\u0660\u0660\u0660\u0661"):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_payload(
                "createUser",
                {
                    "email": "andi@student.ac.id",
                    "password": "rahasia123",
                    "role": "MAHASISWA",
                    "nama": "Andi Pratama",
                    "npm": npm,
                },
            )
        assert exc_info.value.errors[0]["field"] == "npm"
