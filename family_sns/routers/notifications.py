"""
Notifications Router - /notifications endpoints.

Durable counterpart of the live event channel: what a user missed while
offline is listed here.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from family_sns.core.deps import get_current_session, get_db
from family_sns.schemas.auth import UserSession
from family_sns.schemas.notification import (
    NotificationListResponse,
    NotificationRead,
    UnreadCountResponse,
)
from family_sns.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List the caller's notifications, newest first."""
    notifications = notification_service.get_notifications(
        db,
        user_id=session.user_id,
        unread_only=unread_only,
        limit=limit,
        offset=offset,
    )
    return NotificationListResponse(
        items=[NotificationRead.model_validate(n) for n in notifications],
        unread_count=notification_service.get_unread_count(db, session.user_id),
    )


@router.get("/count", response_model=UnreadCountResponse)
def get_unread_count(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get unread notification count (for polling)."""
    return UnreadCountResponse(count=notification_service.get_unread_count(db, session.user_id))


@router.put("/read-all")
def mark_all_read(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    updated = notification_service.mark_all_read(db, session.user_id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Mark one notification as read. Idempotent."""
    notification_service.mark_read(db, notification_id, session.user_id)
    return {"message": "Notification marked as read"}
