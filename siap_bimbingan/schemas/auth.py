# siap_bimbingan/schemas/auth.py
from typing import Optional

from pydantic import EmailStr

from siap_bimbingan.schemas.common import CamelModel
from siap_bimbingan.schemas.user import ProfileRead
from siap_bimbingan.utils.constants import Role


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str
    role: Role
    user_id: int
    profile: Optional[ProfileRead] = None


class CurrentUser(CamelModel):
    """Identity attached to a request after the bearer token is verified."""

    user_id: int
    email: str
    role: Role
    profile_id: Optional[int] = None
