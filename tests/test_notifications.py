from siap_bimbingan.services.notification_service import notify
from siap_bimbingan.utils.constants import NotificationType

from .conftest import auth_headers


def seed(session, user, count):
    for i in range(count):
        notify(
            session,
            user.user_id,
            NotificationType.SESSION_REQUESTED,
            "New guidance request",
            f"Request number {i + 1}",
            link="/dosen/sessions",
        )
    session.commit()


def test_list_and_unread_count(client, session, dosen_user):
    seed(session, dosen_user, 3)
    headers = auth_headers(dosen_user)

    listed = client.get("/notifications", headers=headers, params={"limit": 2})
    assert listed.status_code == 200
    body = listed.json()
    assert len(body["notifications"]) == 2
    assert body["unreadCount"] == 3
    assert body["pagination"]["totalPages"] == 2


def test_mark_one_and_all_as_read(client, session, dosen_user):
    seed(session, dosen_user, 3)
    headers = auth_headers(dosen_user)
    first_id = client.get("/notifications", headers=headers).json()["notifications"][0][
        "notificationId"
    ]

    read = client.put(f"/notifications/{first_id}/read", headers=headers)
    assert read.json()["isRead"] is True
    assert client.get("/notifications/unread-count", headers=headers).json()["unreadCount"] == 2

    unread = client.get("/notifications", headers=headers, params={"unreadOnly": True}).json()
    assert first_id not in [n["notificationId"] for n in unread["notifications"]]

    client.put("/notifications/read-all", headers=headers)
    assert client.get("/notifications/unread-count", headers=headers).json()["unreadCount"] == 0


def test_notifications_are_private(client, session, dosen_user, mahasiswa_user):
    seed(session, dosen_user, 1)
    notification_id = client.get(
        "/notifications", headers=auth_headers(dosen_user)
    ).json()["notifications"][0]["notificationId"]

    other = auth_headers(mahasiswa_user)
    assert client.get("/notifications", headers=other).json()["notifications"] == []
    assert client.put(f"/notifications/{notification_id}/read", headers=other).status_code == 404
    assert client.delete(f"/notifications/{notification_id}", headers=other).status_code == 404

    deleted = client.delete(f"/notifications/{notification_id}", headers=auth_headers(dosen_user))
    assert deleted.status_code == 200
