"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    Family member roles.

    - ADMIN: the member who created the family
    - MEMBER: everyone who joined with the family's invite code
    """
    ADMIN = "admin"
    MEMBER = "member"


class NotificationType(str, Enum):
    """Durable notification kinds (counterparts of real-time events)."""
    MESSAGE = "message"
    COMMENT = "comment"


class EventType(str, Enum):
    """Real-time events pushed over the WebSocket channel."""
    CONNECTED = "connected"
    POST_CREATED = "post-created"
    POST_DELETED = "post-deleted"
    COMMENT_CREATED = "comment-created"
    MESSAGE_RECEIVED = "message-received"


class ClientAction(str, Enum):
    """Frames a client may send over the WebSocket channel."""
    JOIN_FAMILY = "join-family"
    LEAVE_FAMILY = "leave-family"
