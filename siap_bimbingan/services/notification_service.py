import logging
from typing import Optional

from sqlmodel import Session

from siap_bimbingan.models.notification import Notification
from siap_bimbingan.utils.constants import NotificationType
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    link: Optional[str] = None,
) -> Notification:
    """
    Queue a notification for a user.

    The notification is added to the session only; it is committed together
    with the change that triggered it.
    """
    notification = Notification(
        user_id=user_id,
        type=NotificationType(type).value,
        title=title,
        message=message,
        link=link,
        created_at=get_indonesia_time(),
    )
    db.add(notification)
    logger.info(f"Notification {notification.type} queued for user {user_id}")
    return notification
