from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional
from datetime import datetime

from siap_bimbingan.utils.time_utils import get_indonesia_time

if TYPE_CHECKING:
    from siap_bimbingan.models.dosen import Dosen
    from siap_bimbingan.models.mahasiswa import Mahasiswa


class User(SQLModel, table=True):
    user_id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=100)
    password: str = Field()
    role: str = Field(index=True, max_length=20)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=get_indonesia_time)
    updated_at: datetime = Field(default_factory=get_indonesia_time)

    dosen: Optional["Dosen"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
    mahasiswa: Optional["Mahasiswa"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
