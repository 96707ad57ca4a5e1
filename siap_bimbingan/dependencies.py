from typing import Generator, Iterable, Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlmodel import Session, SQLModel, create_engine, select

from siap_bimbingan.config import ALGORITHM, DATABASE_URL, SECRET_KEY, SQL_ECHO
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.user import User
from siap_bimbingan.schemas.auth import CurrentUser
from siap_bimbingan.utils.authentication import get_profile_id
from siap_bimbingan.utils.constants import Role

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(DATABASE_URL, connect_args=connect_args, echo=SQL_ECHO)

# auto_error is off so that a missing token reaches authorize() and gets its 401 there
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token", auto_error=False)


def create_db_and_tables():
    """Create database and tables if they don't exist"""
    SQLModel.metadata.create_all(engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting the database session."""
    with Session(engine) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> Optional[CurrentUser]:
    """
    Resolve the bearer token into a CurrentUser.
    Returns None when no token was sent; an invalid token, an unknown user or
    a deactivated account is rejected with 401.
    """
    if token is None:
        return None

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = payload.get("user_id")
        if user_id is None:
            raise _credentials_exception()
    except JWTError:
        raise _credentials_exception()

    user = db.get(User, user_id)
    if user is None:
        raise _credentials_exception()
    if not user.is_active:
        raise _credentials_exception("Account is not active")

    return CurrentUser(
        user_id=user.user_id,
        email=user.email,
        role=user.role,
        profile_id=get_profile_id(user),
    )


def authorize(identity: Optional[CurrentUser], allowed_roles: Iterable[Role]) -> CurrentUser:
    """
    Role gate shared by every protected route.

    Raises:
        HTTPException: 401 if there is no identity, 403 with the permitted
            roles and the caller's role if the role is not allowed
    """
    allowed = [Role(role).value for role in allowed_roles]

    if identity is None:
        raise _credentials_exception("Not authenticated")

    if identity.role.value not in allowed:
        logger.warning(
            f"User {identity.user_id} with role {identity.role.value} denied, requires {allowed}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": f"Access denied. This resource is only for {', '.join(allowed)}",
                "requiredRoles": allowed,
                "userRole": identity.role.value,
            },
        )

    return identity


def require_roles(*roles: Role):
    """
    Creates a dependency that only lets the given roles through.

    Args:
        roles: Roles permitted on the route

    Returns:
        A dependency function returning the CurrentUser
    """

    async def validate_role(identity=Depends(get_optional_user)) -> CurrentUser:
        return authorize(identity, roles)

    return validate_role


get_current_user = require_roles(Role.ADMIN, Role.DOSEN, Role.MAHASISWA)


async def get_current_dosen(
    identity: CurrentUser = Depends(require_roles(Role.DOSEN)),
    db: Session = Depends(get_db),
) -> Dosen:
    """Get the dosen profile of the current user"""
    dosen = db.exec(select(Dosen).where(Dosen.user_id == identity.user_id)).first()
    if dosen is None:
        raise HTTPException(status_code=404, detail="Dosen profile not found")
    return dosen


async def get_current_mahasiswa(
    identity: CurrentUser = Depends(require_roles(Role.MAHASISWA)),
    db: Session = Depends(get_db),
) -> Mahasiswa:
    """Get the mahasiswa profile of the current user"""
    mahasiswa = db.exec(
        select(Mahasiswa).where(Mahasiswa.user_id == identity.user_id)
    ).first()
    if mahasiswa is None:
        raise HTTPException(status_code=404, detail="Mahasiswa profile not found")
    return mahasiswa
