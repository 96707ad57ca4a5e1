from siap_bimbingan.crud.user import set_user_active

from .conftest import PASSWORD, auth_headers


def test_login_returns_token_role_and_profile(client, dosen_user):
    response = client.post(
        "/auth/login", json={"email": "BUDI@kampus.ac.id", "password": PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["role"] == "DOSEN"
    assert data["userId"] == dosen_user.user_id
    assert data["profile"]["nip"] == "1987654321"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "budi@kampus.ac.id"


def test_token_endpoint_accepts_form_login(client, mahasiswa_user):
    response = client.post(
        "/token", data={"username": "andi@student.ac.id", "password": PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["role"] == "MAHASISWA"


def test_wrong_password_is_rejected(client, dosen_user):
    response = client.post(
        "/auth/login", json={"email": "budi@kampus.ac.id", "password": "salah-sekali"}
    )
    assert response.status_code == 401


def test_inactive_account_cannot_log_in(client, session, admin, dosen_user):
    set_user_active(session, dosen_user.user_id, False, current_user_id=admin.user_id)
    response = client.post(
        "/auth/login", json={"email": "budi@kampus.ac.id", "password": PASSWORD}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is not active"


def test_missing_token_is_unauthenticated(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_invalid_token_is_unauthenticated(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, mahasiswa_user):
    response = client.get("/admin/users", headers=auth_headers(mahasiswa_user))
    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["requiredRoles"] == ["ADMIN"]
    assert detail["userRole"] == "MAHASISWA"


def test_change_password(client, mahasiswa_user):
    headers = auth_headers(mahasiswa_user)
    wrong = client.post(
        "/auth/change-password",
        headers=headers,
        json={
            "currentPassword": "bukan-password",
            "newPassword": "passwordbaru1",
            "confirmPassword": "passwordbaru1",
        },
    )
    assert wrong.status_code == 400

    mismatch = client.post(
        "/auth/change-password",
        headers=headers,
        json={
            "currentPassword": PASSWORD,
            "newPassword": "passwordbaru1",
            "confirmPassword": "passwordbaru2",
        },
    )
    assert mismatch.status_code == 400
    assert mismatch.json()["message"] == "Validation failed"

    ok = client.post(
        "/auth/change-password",
        headers=headers,
        json={
            "currentPassword": PASSWORD,
            "newPassword": "passwordbaru1",
            "confirmPassword": "passwordbaru1",
        },
    )
    assert ok.status_code == 200

    login = client.post(
        "/auth/login", json={"email": "andi@student.ac.id", "password": "passwordbaru1"}
    )
    assert login.status_code == 200
