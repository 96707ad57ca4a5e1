from fastapi import HTTPException
from sqlalchemy import func, update
from sqlmodel import Session, select

from siap_bimbingan.models.notification import Notification


def count_unread(db: Session, user_id: int) -> int:
    return db.exec(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
    ).one()


def get_notifications(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 10,
    unread_only: bool = False,
) -> dict:
    """
    Mengambil notifikasi milik user, terbaru lebih dulu.

    Returns:
        dict: ``notifications``, ``unread_count`` dan ``pagination``
    """
    filters = [Notification.user_id == user_id]
    if unread_only:
        filters.append(Notification.is_read == False)  # noqa: E712

    total = db.exec(select(func.count()).select_from(Notification).where(*filters)).one()
    notifications = db.exec(
        select(Notification)
        .where(*filters)
        .order_by(Notification.created_at.desc(), Notification.notification_id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "notifications": list(notifications),
        "unread_count": count_unread(db, user_id),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit if limit else 0,
        },
    }


def get_notification(db: Session, user_id: int, notification_id: int) -> Notification:
    """Notifikasi milik user lain dianggap tidak ditemukan."""
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise HTTPException(
            status_code=404, detail=f"Notification with ID {notification_id} not found"
        )
    return notification


def mark_as_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = get_notification(db, user_id, notification_id)
    notification.is_read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: int) -> int:
    result = db.connection().execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    db.commit()
    return result.rowcount


def delete_notification(db: Session, user_id: int, notification_id: int) -> None:
    notification = get_notification(db, user_id, notification_id)
    db.delete(notification)
    db.commit()
