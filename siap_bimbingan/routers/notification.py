from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from siap_bimbingan.crud.notification import (
    count_unread,
    delete_notification,
    get_notifications,
    mark_all_as_read,
    mark_as_read,
)
from siap_bimbingan.dependencies import get_current_user, get_db
from siap_bimbingan.schemas.auth import CurrentUser
from siap_bimbingan.schemas.common import MessageResponse
from siap_bimbingan.schemas.notification import NotificationList, NotificationRead, UnreadCount
from siap_bimbingan.utils.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@router.get("", response_model=NotificationList)
def read_notifications_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    return get_notifications(
        db, identity.user_id, page=page, limit=limit, unread_only=unread_only
    )


@router.get("/unread-count", response_model=UnreadCount)
def unread_count_endpoint(
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    """Polled by the client on a fixed interval."""
    return {"unread_count": count_unread(db, identity.user_id)}


@router.put("/read-all", response_model=MessageResponse)
def read_all_endpoint(
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    updated = mark_all_as_read(db, identity.user_id)
    return {"message": f"{updated} notification(s) marked as read"}


@router.put("/{notification_id}/read", response_model=NotificationRead)
def read_notification_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    return mark_as_read(db, identity.user_id, notification_id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    identity: CurrentUser = Depends(get_current_user),
):
    delete_notification(db, identity.user_id, notification_id)
    return {"message": "Notification deleted successfully"}
