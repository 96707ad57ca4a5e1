import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select

from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.notification import Notification
from siap_bimbingan.models.schedule import ScheduleEntry
from siap_bimbingan.models.user import User
from siap_bimbingan.schemas.user import UserCreate, UserUpdate
from siap_bimbingan.utils.authentication import get_password_hash, verify_password
from siap_bimbingan.utils.constants import Role
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)


def profile_to_dict(user: User) -> Optional[dict]:
    """Profil dosen/mahasiswa dalam bentuk ProfileRead, None untuk admin."""
    if user.dosen is not None:
        dosen = user.dosen
        return {
            "id": dosen.dosen_id,
            "nama": dosen.nama,
            "email": dosen.email,
            "phone": dosen.phone,
            "nip": dosen.nip,
        }
    if user.mahasiswa is not None:
        mahasiswa = user.mahasiswa
        return {
            "id": mahasiswa.mahasiswa_id,
            "nama": mahasiswa.nama,
            "email": mahasiswa.email,
            "phone": mahasiswa.phone,
            "npm": mahasiswa.npm,
            "angkatan": mahasiswa.angkatan,
        }
    return None


def user_to_dict(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "profile": profile_to_dict(user),
    }


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.exec(select(User).where(User.email == email)).first()


def _ensure_identifier_free(db: Session, model, column, value: str, label: str, exclude_id=None):
    query = select(model).where(column == value)
    existing = db.exec(query).first()
    if existing is not None and existing.user_id != exclude_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} {value} is already registered",
        )


def create_user(db: Session, user: UserCreate) -> User:
    """
    Membuat user baru beserta profil dosen/mahasiswa sesuai role.

    Email, NIP dan NPM harus unik. Password disimpan dalam bentuk hash bcrypt.

    Raises:
        HTTPException: 400 jika email/NIP/NPM sudah terdaftar
    """
    email = user.email.lower()
    if get_user_by_email(db, email) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Email {email} is already registered",
        )
    if user.role == Role.DOSEN:
        _ensure_identifier_free(db, Dosen, Dosen.nip, user.nip, "NIP")
    if user.role == Role.MAHASISWA:
        _ensure_identifier_free(db, Mahasiswa, Mahasiswa.npm, user.npm, "NPM")

    db_user = User(
        email=email,
        password=get_password_hash(user.password),
        role=user.role.value,
        is_active=True,
        created_at=get_indonesia_time(),
        updated_at=get_indonesia_time(),
    )
    db.add(db_user)
    db.flush()

    if user.role == Role.DOSEN:
        db.add(
            Dosen(
                user_id=db_user.user_id,
                nip=user.nip,
                nama=user.nama,
                email=email,
                phone=user.phone,
                created_at=get_indonesia_time(),
            )
        )
    elif user.role == Role.MAHASISWA:
        db.add(
            Mahasiswa(
                user_id=db_user.user_id,
                npm=user.npm,
                nama=user.nama,
                email=email,
                phone=user.phone,
                angkatan=user.angkatan,
                created_at=get_indonesia_time(),
            )
        )

    db.commit()
    db.refresh(db_user)
    logger.info(f"User {db_user.user_id} created with role {db_user.role}")
    return db_user


def get_users(
    db: Session,
    page: int = 1,
    limit: int = 10,
    role: Optional[Role] = None,
    search: Optional[str] = None,
) -> tuple:
    """
    Mengambil daftar user dengan pagination.

    Returns:
        tuple: (list of users, total count)
    """
    query = select(User)
    count_query = select(func.count()).select_from(User)

    if role is not None:
        query = query.where(User.role == Role(role).value)
        count_query = count_query.where(User.role == Role(role).value)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(func.lower(User.email).like(pattern))
        count_query = count_query.where(func.lower(User.email).like(pattern))

    total = db.exec(count_query).one()
    users = db.exec(
        query.order_by(User.user_id).offset((page - 1) * limit).limit(limit)
    ).all()
    return list(users), total


def get_user(db: Session, user_id: int) -> User:
    """
    Raises:
        HTTPException: 404 jika user tidak ditemukan
    """
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")
    return user


def update_user(db: Session, user_id: int, user: UserUpdate) -> User:
    """
    Memperbarui data user dan profilnya.

    Field yang tidak dikirim tidak diubah. Perubahan email ikut diterapkan ke
    profil dosen/mahasiswa.
    """
    db_user = get_user(db, user_id)
    data = user.model_dump(exclude_unset=True)

    if "email" in data and data["email"] is not None:
        email = data["email"].lower()
        owner = get_user_by_email(db, email)
        if owner is not None and owner.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Email {email} is already registered",
            )
        db_user.email = email
        data["email"] = email

    profile = db_user.dosen or db_user.mahasiswa
    if profile is not None:
        if db_user.dosen is not None and data.get("nip"):
            _ensure_identifier_free(db, Dosen, Dosen.nip, data["nip"], "NIP", exclude_id=user_id)
            profile.nip = data["nip"]
        if db_user.mahasiswa is not None:
            if data.get("npm"):
                _ensure_identifier_free(
                    db, Mahasiswa, Mahasiswa.npm, data["npm"], "NPM", exclude_id=user_id
                )
                profile.npm = data["npm"]
            if "angkatan" in data:
                profile.angkatan = data["angkatan"]
        for field in ("nama", "email", "phone"):
            if field in data and (data[field] is not None or field == "phone"):
                setattr(profile, field, data[field])
        db.add(profile)

    db_user.updated_at = get_indonesia_time()
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, user_id: int, current_user_id: int) -> None:
    """
    Menghapus user beserta profil, jadwal, slot ketersediaan dan notifikasinya.

    User yang sudah memiliki data tugas akhir tidak dapat dihapus; nonaktifkan
    akunnya sebagai gantinya.

    Raises:
        HTTPException: 400 jika admin menghapus akunnya sendiri atau user
            masih memiliki data tugas akhir
    """
    if user_id == current_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    db_user = get_user(db, user_id)

    has_thesis_data = (
        (db_user.mahasiswa is not None and db_user.mahasiswa.thesis_projects)
        or (db_user.dosen is not None and db_user.dosen.supervisions)
        or (
            db_user.dosen is not None
            and db.exec(
                select(GuidanceSession).where(GuidanceSession.dosen_id == db_user.dosen.dosen_id)
            ).first()
            is not None
        )
    )
    if has_thesis_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User has thesis records, deactivate the account instead",
        )

    for model in (ScheduleEntry, Notification):
        for row in db.exec(select(model).where(model.user_id == user_id)).all():
            db.delete(row)
    if db_user.dosen is not None:
        for slot in list(db_user.dosen.availabilities):
            db.delete(slot)
        db.delete(db_user.dosen)
    if db_user.mahasiswa is not None:
        db.delete(db_user.mahasiswa)
    db.delete(db_user)
    db.commit()
    logger.info(f"User {user_id} deleted")


def set_user_active(db: Session, user_id: int, is_active: bool, current_user_id: int) -> User:
    if user_id == current_user_id and not is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account",
        )
    db_user = get_user(db, user_id)
    db_user.is_active = is_active
    db_user.updated_at = get_indonesia_time()
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"User {user_id} {'activated' if is_active else 'deactivated'}")
    return db_user


def reset_password(db: Session, user_id: int, new_password: str) -> None:
    db_user = get_user(db, user_id)
    db_user.password = get_password_hash(new_password)
    db_user.updated_at = get_indonesia_time()
    db.add(db_user)
    db.commit()
    logger.info(f"Password of user {user_id} reset by admin")


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    """
    Mengganti password user yang sedang login setelah memverifikasi password lama.

    Raises:
        HTTPException: 400 jika password lama salah
    """
    db_user = get_user(db, user_id)
    if not verify_password(current_password, db_user.password):
        logger.warning(f"Password change for user {user_id} rejected: wrong current password")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )
    db_user.password = get_password_hash(new_password)
    db_user.updated_at = get_indonesia_time()
    db.add(db_user)
    db.commit()
