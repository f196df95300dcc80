"""Direct message service - one-to-one messages between members of a family."""

import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from family_sns.core.exceptions import (
    EmptyContent,
    MessageNotFound,
    NotAuthorized,
    UserNotFound,
)
from family_sns.db.enums import NotificationType
from family_sns.db.models import Message, User
from family_sns.schemas.message import MessageRead
from family_sns.services import notification_service

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_CHARS = 100


def to_message_read(message: Message) -> MessageRead:
    sender = message.sender
    recipient = message.recipient
    return MessageRead(
        id=message.id,
        sender_id=message.sender_id,
        recipient_id=message.recipient_id,
        content=message.content,
        is_read=message.is_read,
        sender_name=sender.name if sender else None,
        sender_avatar=sender.avatar if sender else None,
        recipient_name=recipient.name if recipient else None,
        recipient_avatar=recipient.avatar if recipient else None,
        created_at=message.created_at,
    )


def _with_participants(query):
    return query.options(joinedload(Message.sender), joinedload(Message.recipient))


def send_message(
    db: Session,
    sender_id: str,
    recipient_id: str,
    content: str | None,
) -> MessageRead:
    """
    Send a direct message to another member of the sender's family.

    The recipient also gets a durable ``message`` notification, committed
    with the message.
    """
    content = (content or "").strip()
    if not content:
        raise EmptyContent("Message must not be empty")

    sender = db.get(User, sender_id)
    if not sender:
        raise UserNotFound()

    recipient = db.get(User, recipient_id)
    if not recipient or not recipient.is_active:
        raise UserNotFound("Recipient not found")
    if recipient.family_id != sender.family_id:
        raise NotAuthorized("Recipient is not in your family")

    message = Message(sender_id=sender.id, recipient_id=recipient.id, content=content)
    db.add(message)
    db.flush()

    notification_service.create_notification(
        db=db,
        user_id=recipient.id,
        type=NotificationType.MESSAGE,
        title=f"New message from {sender.name}",
        message=content[:MESSAGE_PREVIEW_CHARS],
        data={"message_id": message.id, "sender_id": sender.id},
    )

    db.commit()
    db.refresh(message)

    logger.info("User %s sent message %s to user %s", sender.id, message.id, recipient.id)
    return to_message_read(message)


def list_conversation(db: Session, user_id: str, other_user_id: str) -> list[MessageRead]:
    """Messages exchanged between two users in both directions, oldest first."""
    messages = _with_participants(db.query(Message)).filter(
        or_(
            and_(Message.sender_id == user_id, Message.recipient_id == other_user_id),
            and_(Message.sender_id == other_user_id, Message.recipient_id == user_id),
        )
    ).order_by(Message.created_at.asc(), Message.id.asc()).all()
    return [to_message_read(m) for m in messages]


def list_unread(db: Session, user_id: str) -> list[MessageRead]:
    """Unread messages addressed to a user, newest first."""
    messages = _with_participants(db.query(Message)).filter(
        Message.recipient_id == user_id,
        Message.is_read.is_(False),
    ).order_by(Message.created_at.desc(), Message.id.desc()).all()
    return [to_message_read(m) for m in messages]


def mark_read(db: Session, message_id: str, user_id: str) -> Message:
    """
    Mark a message as read. Idempotent.

    Only the recipient may do this; anyone else sees MessageNotFound.
    """
    message = db.query(Message).filter(
        Message.id == message_id,
        Message.recipient_id == user_id,
    ).first()
    if not message:
        raise MessageNotFound()

    if not message.is_read:
        message.is_read = True
        db.commit()
        db.refresh(message)

    return message
