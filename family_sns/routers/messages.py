"""Messages router - direct messages between family members."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from family_sns.core.deps import get_current_session, get_db, require_same_actor
from family_sns.core.websocket import ConnectionManager, get_connection_manager
from family_sns.schemas.auth import UserSession
from family_sns.schemas.message import MessageCreate, MessageListResponse, MessageSentResponse
from family_sns.services import message_service, realtime_events

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("", response_model=MessageListResponse)
def list_conversation(
    user_id: str = Query(..., alias="userId", min_length=1, max_length=64),
    other_user_id: str = Query(..., alias="otherUserId", min_length=1, max_length=64),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Conversation between the caller and another member, oldest first."""
    require_same_actor(session, user_id)
    messages = message_service.list_conversation(db, session.user_id, other_user_id)
    return MessageListResponse(messages=messages)


@router.post("", response_model=MessageSentResponse, status_code=201)
def send_message(
    data: MessageCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    require_same_actor(session, data.sender_id)
    message = message_service.send_message(
        db,
        sender_id=session.user_id,
        recipient_id=data.recipient_id,
        content=data.content,
    )
    realtime_events.publish_message_received(manager, message)
    return MessageSentResponse(message="Message sent successfully", data=message)


@router.get("/unread/{user_id}", response_model=MessageListResponse)
def list_unread(
    user_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    require_same_actor(session, user_id)
    return MessageListResponse(messages=message_service.list_unread(db, session.user_id))


@router.put("/{message_id}/read")
def mark_read(
    message_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Mark a received message as read."""
    message_service.mark_read(db, message_id, session.user_id)
    return {"message": "Message marked as read"}
