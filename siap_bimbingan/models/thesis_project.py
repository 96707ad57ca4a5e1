from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime

from siap_bimbingan.utils.time_utils import get_indonesia_time

if TYPE_CHECKING:
    from siap_bimbingan.models.dosen import Dosen
    from siap_bimbingan.models.mahasiswa import Mahasiswa


class ThesisProject(SQLModel, table=True):
    __tablename__ = "thesis_project"

    thesis_project_id: Optional[int] = Field(default=None, primary_key=True)
    mahasiswa_id: int = Field(foreign_key="mahasiswa.mahasiswa_id", ondelete="CASCADE")
    judul: str = Field(max_length=500)
    tipe: str = Field(max_length=3)
    semester: str = Field(max_length=50)
    status: str = Field(default="ACTIVE", max_length=20)
    created_at: datetime = Field(default_factory=get_indonesia_time)

    mahasiswa: Optional["Mahasiswa"] = Relationship(back_populates="thesis_projects")
    supervisors: List["ThesisSupervisor"] = Relationship(
        back_populates="thesis_project",
        sa_relationship_kwargs={"order_by": "ThesisSupervisor.supervisor_order"},
    )


class ThesisSupervisor(SQLModel, table=True):
    __tablename__ = "thesis_supervisor"

    thesis_project_id: int = Field(
        foreign_key="thesis_project.thesis_project_id",
        primary_key=True,
        ondelete="CASCADE",
    )
    dosen_id: int = Field(
        foreign_key="dosen.dosen_id", primary_key=True, ondelete="CASCADE"
    )
    supervisor_order: int = Field(default=1)

    thesis_project: Optional["ThesisProject"] = Relationship(back_populates="supervisors")
    dosen: Optional["Dosen"] = Relationship(back_populates="supervisions")
