from .conftest import auth_headers


def schedule(day=2, start="10:00", end="11:00", name="Basis Data"):
    return {
        "dayOfWeek": day,
        "startTime": start,
        "endTime": end,
        "courseCode": "IF201",
        "courseName": name,
        "room": "R.301",
        "semester": "2024/2025 Genap",
    }


def test_create_and_list_schedule(client, dosen_user):
    headers = auth_headers(dosen_user)
    created = client.post("/dosen/schedules", headers=headers, json=schedule())
    assert created.status_code == 201
    assert created.json()["userId"] == dosen_user.user_id

    listed = client.get("/dosen/schedules", headers=headers, params={"dayOfWeek": 2})
    assert [entry["courseName"] for entry in listed.json()] == ["Basis Data"]
    assert client.get("/dosen/schedules", headers=headers, params={"dayOfWeek": 3}).json() == []


def test_overlapping_schedule_is_rejected(client, dosen_user):
    headers = auth_headers(dosen_user)
    first = client.post("/dosen/schedules", headers=headers, json=schedule())

    response = client.post(
        "/dosen/schedules", headers=headers, json=schedule(start="10:30", end="11:30", name="Jarkom")
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Schedule conflict detected"
    assert [c["id"] for c in body["conflicts"]] == [first.json()["scheduleId"]]


def test_touching_schedule_is_accepted(client, dosen_user):
    headers = auth_headers(dosen_user)
    client.post("/dosen/schedules", headers=headers, json=schedule())
    response = client.post(
        "/dosen/schedules", headers=headers, json=schedule(start="11:00", end="12:00", name="Jarkom")
    )
    assert response.status_code == 201


def test_schedules_of_different_users_do_not_conflict(client, dosen_user, mahasiswa_user):
    client.post("/dosen/schedules", headers=auth_headers(dosen_user), json=schedule())
    response = client.post(
        "/mahasiswa/schedules", headers=auth_headers(mahasiswa_user), json=schedule()
    )
    assert response.status_code == 201


def test_update_is_checked_against_other_entries_only(client, dosen_user):
    headers = auth_headers(dosen_user)
    first = client.post("/dosen/schedules", headers=headers, json=schedule()).json()
    second = client.post(
        "/dosen/schedules", headers=headers, json=schedule(start="13:00", end="14:00", name="Jarkom")
    ).json()

    moved = client.put(
        f"/dosen/schedules/{first['scheduleId']}",
        headers=headers,
        json={"startTime": "10:15", "endTime": "11:15"},
    )
    assert moved.status_code == 200
    assert moved.json()["startTime"] == "10:15"

    clash = client.put(
        f"/dosen/schedules/{second['scheduleId']}",
        headers=headers,
        json={"startTime": "11:00"},
    )
    assert clash.status_code == 400
    assert clash.json()["conflicts"][0]["id"] == first["scheduleId"]


def test_invalid_schedule_reports_every_field(client, dosen_user):
    response = client.post(
        "/dosen/schedules",
        headers=auth_headers(dosen_user),
        json={"dayOfWeek": 7, "startTime": "9:00", "endTime": "10:00", "courseName": ""},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert {error["field"] for error in body["errors"]} == {"dayOfWeek", "startTime", "courseName"}


def test_other_users_schedule_is_not_found(client, dosen_user, other_dosen_user):
    created = client.post("/dosen/schedules", headers=auth_headers(dosen_user), json=schedule())
    response = client.delete(
        f"/dosen/schedules/{created.json()['scheduleId']}", headers=auth_headers(other_dosen_user)
    )
    assert response.status_code == 404


def test_check_conflict_writes_nothing(client, mahasiswa_user):
    headers = auth_headers(mahasiswa_user)
    created = client.post("/mahasiswa/schedules", headers=headers, json=schedule()).json()

    response = client.post(
        "/schedules/check-conflict",
        headers=headers,
        json={"dayOfWeek": 2, "startTime": "10:30", "endTime": "11:30"},
    )
    assert response.status_code == 200
    assert response.json()["hasConflict"] is True
    assert response.json()["conflicts"][0]["scheduleId"] == created["scheduleId"]

    excluded = client.post(
        "/schedules/check-conflict",
        headers=headers,
        json={
            "dayOfWeek": 2,
            "startTime": "10:30",
            "endTime": "11:30",
            "excludeId": created["scheduleId"],
        },
    )
    assert excluded.json() == {"hasConflict": False, "conflicts": []}
    assert len(client.get("/mahasiswa/schedules", headers=headers).json()) == 1
