from datetime import date

import pytest

from siap_bimbingan.crud.thesis import create_thesis_project
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.schemas.thesis import ThesisProjectCreate
from siap_bimbingan.utils.constants import Role, ThesisType
from siap_bimbingan.utils.time_utils import get_indonesia_time

from .conftest import auth_headers, make_user

PERIOD = {
    "semester": "2024/2025 Genap",
    "startDate": "2025-01-01",
    "endDate": "2025-07-01",
    "utsDate": "2025-03-15",
    "uasDate": "2025-06-01",
}


def add_session(session, project, dosen_user, on, status="COMPLETED"):
    guidance = GuidanceSession(
        thesis_project_id=project.thesis_project_id,
        dosen_id=dosen_user.dosen.dosen_id,
        scheduled_date=on,
        start_time="13:00",
        end_time="14:00",
        location="Ruang Dosen 2",
        status=status,
        created_by=dosen_user.user_id,
        created_at=get_indonesia_time(),
        updated_at=get_indonesia_time(),
    )
    session.add(guidance)
    session.commit()
    return guidance


@pytest.fixture
def active_period(client, admin):
    headers = auth_headers(admin)
    created = client.post("/admin/academic-periods", headers=headers, json=PERIOD)
    assert created.status_code == 201
    activated = client.patch(
        f"/admin/academic-periods/{created.json()['periodId']}/activate", headers=headers
    )
    assert activated.json()["isActive"] is True
    return activated.json()


@pytest.fixture
def eligible_history(session, project, dosen_user):
    for on in (date(2025, 2, 1), date(2025, 3, 15), date(2025, 4, 1), date(2025, 6, 1), date(2025, 6, 20)):
        add_session(session, project, dosen_user, on)
    add_session(session, project, dosen_user, date(2025, 4, 10), status="APPROVED")


def test_mahasiswa_progress(client, active_period, mahasiswa_user, eligible_history):
    response = client.get("/mahasiswa/progress", headers=auth_headers(mahasiswa_user))
    assert response.status_code == 200
    data = response.json()
    progress = data["progress"]

    assert progress["utsDate"] == "2025-03-15"
    assert progress["completedBeforeUts"] == 2
    assert progress["completedBeforeUas"] == 2
    assert progress["completedAfterUas"] == 1
    assert progress["canGraduate"] is True
    assert data["totalGuidance"] == 5
    assert data["dosen"] == "Budi Santoso"
    assert len(data["sessions"]) == 5


def test_progress_without_project(client, mahasiswa_user):
    response = client.get("/mahasiswa/progress", headers=auth_headers(mahasiswa_user))
    assert response.status_code == 404


def test_dosen_sees_supervised_students(
    client, active_period, dosen_user, other_dosen_user, mahasiswa_user, eligible_history
):
    students = client.get("/dosen/students", headers=auth_headers(dosen_user)).json()
    assert [s["npm"] for s in students] == ["2021000001"]
    assert students[0]["progress"]["canGraduate"] is True

    detail = client.get(
        f"/dosen/students/{mahasiswa_user.mahasiswa.mahasiswa_id}/progress",
        headers=auth_headers(dosen_user),
    )
    assert detail.status_code == 200
    assert len(detail.json()["sessions"]) == 5

    assert client.get("/dosen/students", headers=auth_headers(other_dosen_user)).json() == []
    hidden = client.get(
        f"/dosen/students/{mahasiswa_user.mahasiswa.mahasiswa_id}/progress",
        headers=auth_headers(other_dosen_user),
    )
    assert hidden.status_code == 404


def test_monitoring_report(client, session, admin, active_period, dosen_user, eligible_history):
    lagging = make_user(session, Role.MAHASISWA, "dewi@student.ac.id", nama="Dewi Lestari", npm="2021000002")
    lagging_project = create_thesis_project(
        session,
        ThesisProjectCreate(
            mahasiswa_id=lagging.mahasiswa.mahasiswa_id,
            judul="Analisis Sentimen Ulasan Aplikasi Akademik",
            tipe=ThesisType.TA2,
            semester="2024/2025 Genap",
            supervisor_ids=[dosen_user.dosen.dosen_id],
        ),
    )
    add_session(session, lagging_project, dosen_user, date(2025, 2, 10))

    headers = auth_headers(admin)
    report = client.get("/admin/monitoring", headers=headers).json()
    assert report["summary"] == {
        "totalStudents": 2,
        "meetingRequirements": 1,
        "notMeetingRequirements": 1,
    }

    lagging_only = client.get("/admin/monitoring/not-meeting-requirements", headers=headers).json()
    assert [s["npm"] for s in lagging_only["students"]] == ["2021000002"]
    assert lagging_only["students"][0]["progress"]["requiredBeforeUts"] == 3

    ta1_only = client.get("/admin/monitoring", headers=headers, params={"tipe": "TA1"}).json()
    assert ta1_only["summary"]["totalStudents"] == 1


def test_session_timestamps_default_to_aware_datetimes(project, dosen_user):
    guidance = GuidanceSession(
        thesis_project_id=project.thesis_project_id,
        dosen_id=dosen_user.dosen.dosen_id,
        scheduled_date=date(2025, 2, 1),
        start_time="13:00",
        end_time="14:00",
        location="Ruang Dosen 2",
        status="COMPLETED",
        created_by=dosen_user.user_id,
    )
    assert guidance.created_at.utcoffset() is not None
    assert guidance.updated_at.utcoffset() is not None
