from datetime import date, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from siap_bimbingan import models  # noqa: F401
from siap_bimbingan.crud.thesis import create_thesis_project
from siap_bimbingan.crud.user import create_user
from siap_bimbingan.dependencies import get_db
from siap_bimbingan.main import app
from siap_bimbingan.models.user import User
from siap_bimbingan.schemas.thesis import ThesisProjectCreate
from siap_bimbingan.schemas.user import UserCreate
from siap_bimbingan.utils.authentication import create_access_token
from siap_bimbingan.utils.constants import Role, ThesisType
from siap_bimbingan.utils.time_utils import day_of_week, get_indonesia_date

PASSWORD = "rahasia123"


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def make_user(
    session: Session,
    role: Role,
    email: str,
    nama: str = "Pengguna Uji",
    nip: Optional[str] = None,
    npm: Optional[str] = None,
) -> User:
    return create_user(
        session,
        UserCreate(
            email=email,
            password=PASSWORD,
            role=role,
            nama=nama,
            nip=nip,
            npm=npm,
            angkatan=2021 if role == Role.MAHASISWA else None,
        ),
    )


def auth_headers(user: User) -> dict:
    token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=30),
        role=user.role,
        user_id=user.user_id,
    )
    return {"Authorization": f"Bearer {token}"}


def next_date_on(day_index: int, weeks_ahead: int = 1) -> date:
    """A future date falling on ``day_index`` (0 = Sunday)."""
    start = get_indonesia_date() + timedelta(days=7 * weeks_ahead)
    while day_of_week(start) != day_index:
        start += timedelta(days=1)
    return start


@pytest.fixture
def admin(session: Session) -> User:
    return make_user(session, Role.ADMIN, "admin@kampus.ac.id", nama="Admin Prodi")


@pytest.fixture
def dosen_user(session: Session) -> User:
    return make_user(
        session, Role.DOSEN, "budi@kampus.ac.id", nama="Budi Santoso", nip="1987654321"
    )


@pytest.fixture
def other_dosen_user(session: Session) -> User:
    return make_user(
        session, Role.DOSEN, "sari@kampus.ac.id", nama="Sari Wulandari", nip="1976543210"
    )


@pytest.fixture
def mahasiswa_user(session: Session) -> User:
    return make_user(
        session, Role.MAHASISWA, "andi@student.ac.id", nama="Andi Pratama", npm="2021000001"
    )


@pytest.fixture
def project(session: Session, dosen_user: User, mahasiswa_user: User):
    return create_thesis_project(
        session,
        ThesisProjectCreate(
            mahasiswa_id=mahasiswa_user.mahasiswa.mahasiswa_id,
            judul="Sistem Penjadwalan Bimbingan Tugas Akhir",
            tipe=ThesisType.TA1,
            semester="2024/2025 Genap",
            supervisor_ids=[dosen_user.dosen.dosen_id],
        ),
    )
