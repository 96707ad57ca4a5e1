from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from siap_bimbingan.schemas.common import CamelModel, IdentifierStr, Pagination
from siap_bimbingan.utils.constants import PASSWORD_MIN_LENGTH, Role


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=100)
    role: Role
    nama: str = Field(min_length=3, max_length=100)
    nip: Optional[IdentifierStr] = None
    npm: Optional[IdentifierStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    angkatan: Optional[int] = Field(default=None, ge=2000, le=datetime.now().year + 1)

    @model_validator(mode="after")
    def check_profile_identifier(self):
        if self.role == Role.DOSEN and not self.nip:
            raise ValueError("NIP/NIDN is required for DOSEN")
        if self.role == Role.MAHASISWA and not self.npm:
            raise ValueError("NPM is required for MAHASISWA")
        return self


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    nama: Optional[str] = Field(default=None, min_length=3, max_length=100)
    nip: Optional[IdentifierStr] = None
    npm: Optional[IdentifierStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    angkatan: Optional[int] = Field(default=None, ge=2000, le=datetime.now().year + 1)


class UserToggle(CamelModel):
    is_active: bool


class ProfileRead(CamelModel):
    id: int
    nama: str
    email: str
    phone: Optional[str] = None
    nip: Optional[str] = None
    npm: Optional[str] = None
    angkatan: Optional[int] = None


class UserRead(CamelModel):
    user_id: int
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    profile: Optional[ProfileRead] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        return self


class ResetPasswordRequest(CamelModel):
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=100)


class UserList(CamelModel):
    items: List[UserRead]
    pagination: Pagination
