from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from siap_bimbingan.utils.time_utils import get_indonesia_time


class Notification(SQLModel, table=True):
    notification_id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.user_id", index=True, ondelete="CASCADE")
    type: str = Field(max_length=50)
    title: str = Field(max_length=200)
    message: str = Field()
    link: Optional[str] = Field(default=None)
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=get_indonesia_time)
