import uuid

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.notification import Notification, NotificationType
from storefront.observability import metrics_store


def create_notification(
    db: Session,
    notification_type: NotificationType,
    title: str,
    message: str,
    reference_id: str | None = None,
) -> Notification:
    notification = Notification(
        type=notification_type,
        title=title,
        message=message,
        reference_id=reference_id,
        is_read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    metrics_store.increment("notification_created_total")
    return notification


def list_notifications(db: Session, limit: int | None = None) -> list[Notification]:
    query = (
        select(Notification)
        .order_by(Notification.created_at.desc())
        .limit(limit or settings.notifications_page_size)
    )
    return list(db.scalars(query))


def unread_count(db: Session) -> int:
    query = select(func.count()).select_from(Notification).where(Notification.is_read.is_(False))
    return int(db.scalar(query) or 0)


def get_notification(db: Session, notification_id: uuid.UUID) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


def mark_as_read(db: Session, notification_id: uuid.UUID) -> Notification:
    notification = get_notification(db, notification_id)
    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_as_read(db: Session) -> int:
    result = db.execute(
        update(Notification).where(Notification.is_read.is_(False)).values(is_read=True)
    )
    db.commit()
    return int(result.rowcount or 0)


def delete_notification(db: Session, notification_id: uuid.UUID) -> None:
    get_notification(db, notification_id)
    db.execute(delete(Notification).where(Notification.id == notification_id))
    db.commit()
