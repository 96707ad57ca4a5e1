from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime, date

from siap_bimbingan.utils.time_utils import get_indonesia_time

if TYPE_CHECKING:
    from siap_bimbingan.models.thesis_project import ThesisProject


class GuidanceSession(SQLModel, table=True):
    __tablename__ = "guidance_session"

    session_id: Optional[int] = Field(default=None, primary_key=True)
    thesis_project_id: int = Field(
        foreign_key="thesis_project.thesis_project_id", index=True, ondelete="CASCADE"
    )
    dosen_id: int = Field(foreign_key="dosen.dosen_id", index=True)
    availability_id: Optional[int] = Field(
        default=None, foreign_key="availability_slot.availability_id", ondelete="SET NULL"
    )
    scheduled_date: date = Field(index=True)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    location: str = Field(default="TBD", max_length=100)
    status: str = Field(index=True, max_length=20)
    agenda: Optional[str] = Field(default=None)
    reason: Optional[str] = Field(default=None)
    created_by: int = Field(foreign_key="user.user_id")
    created_at: datetime = Field(default_factory=get_indonesia_time)
    updated_at: datetime = Field(default_factory=get_indonesia_time)

    thesis_project: Optional["ThesisProject"] = Relationship()
    notes: List["GuidanceNote"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"order_by": "GuidanceNote.created_at"},
    )


class GuidanceNote(SQLModel, table=True):
    __tablename__ = "guidance_note"

    note_id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(
        foreign_key="guidance_session.session_id", index=True, ondelete="CASCADE"
    )
    dosen_id: int = Field(foreign_key="dosen.dosen_id")
    content: str = Field()
    tasks: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=get_indonesia_time)

    session: Optional["GuidanceSession"] = Relationship(back_populates="notes")
