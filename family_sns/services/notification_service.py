"""
Notification Service - durable in-app notifications.

The persistent counterpart of the fan-out channel: a notification is written
in the same transaction as the row that caused it, so a user who was offline
still finds it later.
"""

from typing import Any

from sqlalchemy.orm import Session

from family_sns.core.exceptions import NotificationNotFound
from family_sns.db.enums import NotificationType
from family_sns.db.models import Notification


def create_notification(
    db: Session,
    user_id: str,
    type: NotificationType,
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> Notification:
    """
    Stage a notification for a user.

    Flushed, not committed: the caller commits it together with the
    triggering row.
    """
    notification = Notification(
        user_id=user_id,
        type=type.value,
        title=title,
        message=message,
        data=data,
    )
    db.add(notification)
    db.flush()
    return notification


def get_notifications(
    db: Session,
    user_id: str,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> list[Notification]:
    """Get notifications for user, newest first."""
    query = db.query(Notification).filter(Notification.user_id == user_id)

    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    return query.order_by(
        Notification.created_at.desc(), Notification.id.desc()
    ).offset(offset).limit(limit).all()


def get_unread_count(db: Session, user_id: str) -> int:
    """Get count of unread notifications."""
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def mark_read(db: Session, notification_id: str, user_id: str) -> Notification:
    """Mark a notification as read. Idempotent."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        raise NotificationNotFound()

    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)

    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark all notifications as read. Returns count updated."""
    count = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return count
