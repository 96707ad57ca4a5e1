from datetime import date

from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.utils.time_utils import get_indonesia_date, get_indonesia_time

from .conftest import auth_headers, next_date_on

TUESDAY = 2


def add_session(session, project, dosen_user, on, status, start="08:00", end="09:00"):
    guidance = GuidanceSession(
        thesis_project_id=project.thesis_project_id,
        dosen_id=dosen_user.dosen.dosen_id,
        scheduled_date=on,
        start_time=start,
        end_time=end,
        location="Ruang Dosen 2",
        status=status,
        created_by=dosen_user.user_id,
        created_at=get_indonesia_time(),
        updated_at=get_indonesia_time(),
    )
    session.add(guidance)
    session.commit()
    return guidance


def request_tuesday_session(client, dosen_user, mahasiswa_user):
    slot = client.post(
        "/dosen/availabilities",
        headers=auth_headers(dosen_user),
        json={"isRecurring": True, "dayOfWeek": TUESDAY, "startTime": "13:00", "endTime": "14:00"},
    ).json()
    response = client.post(
        "/mahasiswa/sessions",
        headers=auth_headers(mahasiswa_user),
        json={"availabilityId": slot["availabilityId"], "scheduledDate": next_date_on(TUESDAY).isoformat()},
    )
    assert response.status_code == 201
    return response.json()


def test_admin_dashboard_stats(client, session, admin, project, dosen_user, mahasiswa_user):
    request_tuesday_session(client, dosen_user, mahasiswa_user)
    add_session(session, project, dosen_user, date(2025, 2, 1), "COMPLETED")

    response = client.get("/admin/dashboard/stats", headers=auth_headers(admin))
    assert response.status_code == 200
    stats = response.json()
    assert stats["totalUsers"] == 3
    assert stats["totalDosen"] == 1
    assert stats["totalMahasiswa"] == 1
    assert stats["activeProjects"] == 1
    assert stats["totalSessions"] == 2
    assert stats["pendingSessions"] == 1
    assert stats["completedSessions"] == 1
    assert stats["sessionsByStatus"]["CANCELLED"] == 0


def test_admin_dashboard_is_admin_only(client, dosen_user):
    response = client.get("/admin/dashboard/stats", headers=auth_headers(dosen_user))
    assert response.status_code == 403


def test_dosen_dashboard(client, session, project, dosen_user, other_dosen_user, mahasiswa_user):
    requested = request_tuesday_session(client, dosen_user, mahasiswa_user)
    today = get_indonesia_date()
    add_session(session, project, dosen_user, today, "APPROVED", start="10:00", end="11:00")
    add_session(session, project, dosen_user, today, "COMPLETED", start="07:00", end="08:00")

    response = client.get("/dosen/dashboard", headers=auth_headers(dosen_user))
    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {
        "totalStudents": 1,
        "pendingRequests": 1,
        "todaySessions": 1,
        "completedThisMonth": 1,
    }
    assert [s["startTime"] for s in body["todaySessions"]] == ["10:00"]
    assert [s["sessionId"] for s in body["pendingRequests"]] == [requested["sessionId"]]

    other = client.get("/dosen/dashboard", headers=auth_headers(other_dosen_user)).json()
    assert other["stats"]["totalStudents"] == 0
    assert other["pendingRequests"] == []


def test_mahasiswa_dashboard_without_project(client, mahasiswa_user):
    response = client.get("/mahasiswa/dashboard", headers=auth_headers(mahasiswa_user))
    assert response.status_code == 200
    body = response.json()
    assert body["hasThesisProject"] is False
    assert body["thesisProject"] is None
    assert body["stats"]["totalGuidance"] == 0


def test_mahasiswa_dashboard(client, session, project, dosen_user, mahasiswa_user):
    requested = request_tuesday_session(client, dosen_user, mahasiswa_user)
    add_session(session, project, dosen_user, date(2025, 2, 1), "COMPLETED")

    body = client.get("/mahasiswa/dashboard", headers=auth_headers(mahasiswa_user)).json()
    assert body["hasThesisProject"] is True
    assert body["stats"]["totalGuidance"] == 1
    assert body["stats"]["pendingSessions"] == 1
    assert body["stats"]["beforeUts"] == 1
    assert body["stats"]["canGraduate"] is False
    assert [s["sessionId"] for s in body["upcomingSessions"]] == [requested["sessionId"]]
    assert [s["nama"] for s in body["thesisProject"]["supervisors"]] == ["Budi Santoso"]
