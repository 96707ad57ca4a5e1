from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import update

from siap_bimbingan.crud.guidance import approve_session
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.utils.constants import Role
from siap_bimbingan.utils.time_utils import get_indonesia_date

from .conftest import auth_headers, make_user, next_date_on

TUESDAY = 2


@pytest.fixture
def slot(client, dosen_user):
    response = client.post(
        "/dosen/availabilities",
        headers=auth_headers(dosen_user),
        json={
            "isRecurring": True,
            "dayOfWeek": TUESDAY,
            "startTime": "13:00",
            "endTime": "14:00",
            "location": "Ruang Dosen 2",
        },
    )
    assert response.status_code == 201
    return response.json()


def request_guidance(client, mahasiswa_user, slot, scheduled_date=None):
    return client.post(
        "/mahasiswa/sessions",
        headers=auth_headers(mahasiswa_user),
        json={
            "availabilityId": slot["availabilityId"],
            "scheduledDate": (scheduled_date or next_date_on(TUESDAY)).isoformat(),
            "agenda": "Review bab 2",
        },
    )


def offer_guidance(client, dosen_user, mahasiswa_user, start="09:00", end="10:00"):
    return client.post(
        "/dosen/sessions/offer",
        headers=auth_headers(dosen_user),
        json={
            "mahasiswaId": mahasiswa_user.mahasiswa.mahasiswa_id,
            "scheduledDate": next_date_on(TUESDAY).isoformat(),
            "startTime": start,
            "endTime": end,
            "location": "Lab RPL",
        },
    )


def test_available_slots_respect_student_schedule(client, project, dosen_user, mahasiswa_user, slot):
    headers = auth_headers(mahasiswa_user)
    params = {"dosenId": dosen_user.dosen.dosen_id, "date": next_date_on(TUESDAY).isoformat()}

    response = client.get("/mahasiswa/available-slots", headers=headers, params=params)
    assert response.status_code == 200
    assert [s["isAvailable"] for s in response.json()["availableSlots"]] == [True]

    client.post(
        "/mahasiswa/schedules",
        headers=headers,
        json={"dayOfWeek": TUESDAY, "startTime": "13:30", "endTime": "15:00", "courseName": "Statistika"},
    )
    response = client.get("/mahasiswa/available-slots", headers=headers, params=params)
    assert [s["isAvailable"] for s in response.json()["availableSlots"]] == [False]

    wednesday = {"dosenId": params["dosenId"], "date": next_date_on(3).isoformat()}
    response = client.get("/mahasiswa/available-slots", headers=headers, params=wednesday)
    assert response.json()["availableSlots"] == []


def test_available_slots_only_for_own_supervisors(client, project, other_dosen_user, mahasiswa_user):
    response = client.get(
        "/mahasiswa/available-slots",
        headers=auth_headers(mahasiswa_user),
        params={"dosenId": other_dosen_user.dosen.dosen_id, "date": next_date_on(TUESDAY).isoformat()},
    )
    assert response.status_code == 404


def test_request_approve_note_complete(client, project, dosen_user, mahasiswa_user, slot):
    requested = request_guidance(client, mahasiswa_user, slot)
    assert requested.status_code == 201
    session = requested.json()
    assert session["status"] == "PENDING"
    assert session["startTime"] == "13:00"
    assert session["location"] == "Ruang Dosen 2"

    dosen_headers = auth_headers(dosen_user)
    assert client.get("/notifications/unread-count", headers=dosen_headers).json() == {
        "unreadCount": 1
    }

    early_note = client.post(
        f"/dosen/sessions/{session['sessionId']}/notes",
        headers=dosen_headers,
        json={"content": "Terlalu cepat"},
    )
    assert early_note.status_code == 400

    approved = client.put(
        f"/dosen/sessions/{session['sessionId']}/approve",
        headers=dosen_headers,
        json={"location": "Ruang Rapat"},
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"
    assert approved.json()["location"] == "Ruang Rapat"

    note = client.post(
        f"/dosen/sessions/{session['sessionId']}/notes",
        headers=dosen_headers,
        json={"content": "Perbaiki tinjauan pustaka", "tasks": "Tambah 5 referensi"},
    )
    assert note.status_code == 201
    assert note.json()["dosenNama"] == "Budi Santoso"

    completed = client.put(
        f"/dosen/sessions/{session['sessionId']}/complete", headers=dosen_headers
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "COMPLETED"
    assert len(completed.json()["notes"]) == 1

    detail = client.get(
        f"/mahasiswa/sessions/{session['sessionId']}", headers=auth_headers(mahasiswa_user)
    )
    assert detail.json()["notes"][0]["content"] == "Perbaiki tinjauan pustaka"


def test_transition_from_wrong_status_is_refused(client, project, dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    headers = auth_headers(dosen_user)

    assert client.put(f"/dosen/sessions/{session_id}/complete", headers=headers).status_code == 400
    assert client.put(f"/dosen/sessions/{session_id}/approve", headers=headers).status_code == 200

    again = client.put(f"/dosen/sessions/{session_id}/approve", headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Cannot approve a session with status APPROVED"


def test_reject_with_reason(client, project, dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    rejected = client.put(
        f"/dosen/sessions/{session_id}/reject",
        headers=auth_headers(dosen_user),
        json={"reason": "Sedang dinas luar"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "REJECTED"
    assert rejected.json()["reason"] == "Sedang dinas luar"

    notifications = client.get("/notifications", headers=auth_headers(mahasiswa_user)).json()
    assert notifications["notifications"][0]["type"] == "SESSION_REJECTED"


def test_same_slot_cannot_be_requested_twice(client, project, mahasiswa_user, slot):
    assert request_guidance(client, mahasiswa_user, slot).status_code == 201
    second = request_guidance(client, mahasiswa_user, slot)
    assert second.status_code == 400
    assert second.json()["message"] == "Schedule conflict detected"
    assert {c["source"] for c in second.json()["conflicts"]} == {"DOSEN_SESSION"}


def test_slot_freed_after_cancel(client, project, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    cancelled = client.put(
        f"/mahasiswa/sessions/{session_id}/cancel", headers=auth_headers(mahasiswa_user)
    )
    assert cancelled.json()["status"] == "CANCELLED"
    assert request_guidance(client, mahasiswa_user, slot).status_code == 201

    again = client.put(
        f"/mahasiswa/sessions/{session_id}/cancel", headers=auth_headers(mahasiswa_user)
    )
    assert again.status_code == 400


def test_request_rejects_past_date_and_wrong_day(client, project, mahasiswa_user, slot):
    past = get_indonesia_date() - timedelta(days=7)
    assert request_guidance(client, mahasiswa_user, slot, past).status_code == 400

    wrong_day = request_guidance(client, mahasiswa_user, slot, next_date_on(4))
    assert wrong_day.status_code == 400
    assert wrong_day.json()["detail"] == "The selected slot is not available on this date"


def test_request_without_active_project(client, session, slot):
    loner = make_user(session, Role.MAHASISWA, "rina@student.ac.id", nama="Rina", npm="2021000099")
    response = request_guidance(client, loner, slot)
    assert response.status_code == 400
    assert response.json()["detail"] == "Mahasiswa has no active thesis project"


def test_request_from_non_supervisor_slot(client, project, other_dosen_user, mahasiswa_user):
    foreign = client.post(
        "/dosen/availabilities",
        headers=auth_headers(other_dosen_user),
        json={"isRecurring": True, "dayOfWeek": TUESDAY, "startTime": "08:00", "endTime": "09:00"},
    ).json()
    response = request_guidance(client, mahasiswa_user, foreign)
    assert response.status_code == 403


def test_edit_pending_request(client, project, dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    thursday_slot = client.post(
        "/dosen/availabilities",
        headers=auth_headers(dosen_user),
        json={"isRecurring": True, "dayOfWeek": 4, "startTime": "10:00", "endTime": "11:00", "location": "Lab RPL"},
    ).json()

    response = client.put(
        f"/mahasiswa/sessions/{session_id}",
        headers=auth_headers(mahasiswa_user),
        json={
            "availabilityId": thursday_slot["availabilityId"],
            "scheduledDate": next_date_on(4).isoformat(),
            "agenda": "Review bab 3",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["availabilityId"], body["startTime"], body["endTime"]) == (
        thursday_slot["availabilityId"],
        "10:00",
        "11:00",
    )
    assert body["location"] == "Lab RPL"
    assert body["agenda"] == "Review bab 3"


def test_edit_cannot_leave_the_availability_slot(client, project, mahasiswa_user, slot):
    requested = request_guidance(client, mahasiswa_user, slot).json()
    headers = auth_headers(mahasiswa_user)

    saturday = client.put(
        f"/mahasiswa/sessions/{requested['sessionId']}",
        headers=headers,
        json={"scheduledDate": next_date_on(6).isoformat(), "startTime": "03:00", "endTime": "04:00"},
    )
    assert saturday.status_code == 400

    free_times = client.put(
        f"/mahasiswa/sessions/{requested['sessionId']}",
        headers=headers,
        json={"startTime": "03:00", "endTime": "04:00"},
    )
    assert free_times.status_code == 200
    assert (free_times.json()["startTime"], free_times.json()["endTime"]) == ("13:00", "14:00")
    assert free_times.json()["availabilityId"] == slot["availabilityId"]
    assert free_times.json()["scheduledDate"] == requested["scheduledDate"]


def test_edit_to_a_non_supervisor_slot(client, project, other_dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    foreign = client.post(
        "/dosen/availabilities",
        headers=auth_headers(other_dosen_user),
        json={"isRecurring": True, "dayOfWeek": TUESDAY, "startTime": "08:00", "endTime": "09:00"},
    ).json()
    response = client.put(
        f"/mahasiswa/sessions/{session_id}",
        headers=auth_headers(mahasiswa_user),
        json={"availabilityId": foreign["availabilityId"]},
    )
    assert response.status_code == 403


def test_offer_accept(client, project, dosen_user, mahasiswa_user):
    offered = offer_guidance(client, dosen_user, mahasiswa_user)
    assert offered.status_code == 201
    assert offered.json()["status"] == "OFFERED"

    accepted = client.put(
        f"/mahasiswa/sessions/{offered.json()['sessionId']}/accept",
        headers=auth_headers(mahasiswa_user),
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "APPROVED"

    types = [
        n["type"]
        for n in client.get("/notifications", headers=auth_headers(dosen_user)).json()["notifications"]
    ]
    assert "SESSION_ACCEPTED" in types


def test_decline_requires_reason(client, project, dosen_user, mahasiswa_user):
    session_id = offer_guidance(client, dosen_user, mahasiswa_user).json()["sessionId"]
    headers = auth_headers(mahasiswa_user)

    missing = client.put(f"/mahasiswa/sessions/{session_id}/decline", headers=headers, json={})
    assert missing.status_code == 400
    assert missing.json()["errors"][0]["field"] == "reason"

    declined = client.put(
        f"/mahasiswa/sessions/{session_id}/decline",
        headers=headers,
        json={"reason": "Ada ujian susulan"},
    )
    assert declined.status_code == 200
    assert declined.json()["status"] == "DECLINED"
    assert declined.json()["reason"] == "Ada ujian susulan"


def test_offer_conflicting_with_teaching_schedule(client, project, dosen_user, mahasiswa_user):
    client.post(
        "/dosen/schedules",
        headers=auth_headers(dosen_user),
        json={"dayOfWeek": TUESDAY, "startTime": "08:00", "endTime": "09:30", "courseName": "Algoritma"},
    )
    response = offer_guidance(client, dosen_user, mahasiswa_user)
    assert response.status_code == 400
    assert response.json()["conflicts"][0]["source"] == "DOSEN_SCHEDULE"


def test_offer_to_unsupervised_student(client, project, other_dosen_user, mahasiswa_user):
    response = offer_guidance(client, other_dosen_user, mahasiswa_user)
    assert response.status_code == 403


def test_session_lists_are_scoped(client, project, dosen_user, other_dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]

    listed = client.get("/dosen/sessions", headers=auth_headers(dosen_user), params={"status": "PENDING"})
    assert [s["sessionId"] for s in listed.json()["sessions"]] == [session_id]
    assert listed.json()["pagination"]["total"] == 1

    other = client.get("/dosen/sessions", headers=auth_headers(other_dosen_user))
    assert other.json()["sessions"] == []
    assert (
        client.get(f"/dosen/sessions/{session_id}", headers=auth_headers(other_dosen_user)).status_code
        == 404
    )


def test_stale_transition_gets_409(client, session, project, dosen_user, mahasiswa_user, slot):
    session_id = request_guidance(client, mahasiswa_user, slot).json()["sessionId"]
    guidance = session.get(GuidanceSession, session_id)
    assert guidance.status == "PENDING"

    # another request cancels it behind the loaded object's back
    session.expire_on_commit = False
    session.connection().execute(
        update(GuidanceSession)
        .where(GuidanceSession.session_id == session_id)
        .values(status="CANCELLED")
    )
    session.commit()
    assert guidance.status == "PENDING"

    with pytest.raises(HTTPException) as exc_info:
        approve_session(session, dosen_user.dosen, session_id)
    assert exc_info.value.status_code == 409

    session.expire_on_commit = True
    assert session.get(GuidanceSession, session_id).status == "CANCELLED"
