from datetime import timedelta
import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session

from siap_bimbingan.config import ACCESS_TOKEN_EXPIRE_MINUTES
from siap_bimbingan.crud.user import change_password, get_user, profile_to_dict, user_to_dict
from siap_bimbingan.dependencies import get_current_user, get_db
from siap_bimbingan.models.user import User
from siap_bimbingan.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from siap_bimbingan.schemas.common import MessageResponse
from siap_bimbingan.schemas.user import ChangePasswordRequest, UserRead
from siap_bimbingan.utils.authentication import authenticate, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
)


def issue_token(user: User) -> dict:
    """Build the login response for an authenticated user."""
    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        role=user.role,
        user_id=user.user_id,
    )
    logger.info(f"User {user.user_id} logged in as {user.role}")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
        "user_id": user.user_id,
        "profile": profile_to_dict(user),
    }


@router.post("/login", response_model=TokenResponse)
def login_endpoint(credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Login with a JSON body of email and password.
    Returns the bearer token together with the role and profile of the user.
    """
    user, _ = authenticate(db, credentials.email.lower(), credentials.password)
    return issue_token(user)


@router.get("/me", response_model=UserRead)
def read_me_endpoint(
    identity: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Account and profile of the authenticated user."""
    return user_to_dict(get_user(db, identity.user_id))


@router.post("/change-password", response_model=MessageResponse)
def change_password_endpoint(
    request: ChangePasswordRequest,
    identity: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Change password for any authenticated user.
    The current password must be correct and the new one must match its confirmation.
    """
    change_password(
        db,
        identity.user_id,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    return {"message": "Password successfully changed"}
