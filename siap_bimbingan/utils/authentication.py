from typing import Optional, Tuple
from datetime import timedelta
import logging

from fastapi import HTTPException, status
from jose import jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from siap_bimbingan.config import ALGORITHM, SECRET_KEY
from siap_bimbingan.models.user import User
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash."""
    return pwd_context.hash(password)


def authenticate(db: Session, email: str, password: str) -> Tuple[User, Optional[int]]:
    """
    Authenticate a user of any role by email and password.
    Returns a tuple of (user, profile_id) where profile_id is the dosen or
    mahasiswa id for those roles and None for admins.
    """
    user = db.exec(select(User).where(User.email == email)).first()

    if user is None or not verify_password(password, user.password):
        logger.warning(f"Failed login attempt for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning(f"Login attempt for inactive account {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is not active",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user, get_profile_id(user)


def get_profile_id(user: User) -> Optional[int]:
    if user.dosen is not None:
        return user.dosen.dosen_id
    if user.mahasiswa is not None:
        return user.mahasiswa.mahasiswa_id
    return None


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    role: str = None,
    user_id: int = None,
):
    """Create a JWT access token with role and user ID."""
    to_encode = data.copy()

    if expires_delta:
        expire = get_indonesia_time() + expires_delta
    else:
        expire = get_indonesia_time() + timedelta(minutes=15)

    to_encode.update({"exp": expire})
    if role:
        to_encode.update({"role": role})
    if user_id:
        to_encode.update({"user_id": user_id})

    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

    return encoded_jwt
