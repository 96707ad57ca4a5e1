from datetime import datetime
from typing import List, Optional

from siap_bimbingan.schemas.common import CamelModel, Pagination


class NotificationRead(CamelModel):
    notification_id: int
    type: str
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: datetime


class NotificationList(CamelModel):
    notifications: List[NotificationRead]
    unread_count: int
    pagination: Pagination


class UnreadCount(CamelModel):
    unread_count: int
