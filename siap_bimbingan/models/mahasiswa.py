from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime

from siap_bimbingan.utils.time_utils import get_indonesia_time

if TYPE_CHECKING:
    from siap_bimbingan.models.user import User
    from siap_bimbingan.models.thesis_project import ThesisProject


class Mahasiswa(SQLModel, table=True):
    mahasiswa_id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.user_id", unique=True, ondelete="CASCADE")
    npm: str = Field(unique=True, index=True, max_length=10)
    nama: str = Field(max_length=100)
    email: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    angkatan: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=get_indonesia_time)

    user: Optional["User"] = Relationship(back_populates="mahasiswa")
    thesis_projects: List["ThesisProject"] = Relationship(back_populates="mahasiswa")
