"""Real-time event facade.

Domain operations call these after their transaction has committed so a
client reacting to an event by re-querying sees the new row. Publishing is
best-effort: a failure is logged and never fails the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

import anyio

from family_sns.core.websocket import ConnectionManager, family_topic, user_topic
from family_sns.db.enums import EventType
from family_sns.schemas.message import MessageRead
from family_sns.schemas.post import CommentRead, PostRead

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_on_event_loop(func: Callable[..., Awaitable[T]], *args: Any) -> T:
    """
    Run an async callable from synchronous code.

    Route handlers are sync and execute in AnyIO worker threads; sockets
    belong to the main loop, so the call is sent back there. Outside a
    worker thread (CLI commands) a fresh loop is started instead.
    """
    try:
        return anyio.from_thread.run(func, *args)
    except RuntimeError:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return anyio.run(func, *args)
        raise RuntimeError("Cannot publish synchronously from the event loop thread") from None


def _publish(
    manager: ConnectionManager,
    topic: str,
    event_type: EventType,
    data: Any,
    exclude: str | None = None,
) -> int:
    try:
        return run_on_event_loop(manager.publish, topic, event_type.value, data, exclude)
    except Exception:
        logger.warning("Failed to publish %s to %s", event_type.value, topic, exc_info=True)
        return 0


def publish_post_created(
    manager: ConnectionManager, post: PostRead, exclude: str | None = None
) -> int:
    """Announce a new post to the author's family."""
    return _publish(
        manager,
        family_topic(post.family_id),
        EventType.POST_CREATED,
        post.model_dump(mode="json"),
        exclude=exclude,
    )


def publish_post_deleted(
    manager: ConnectionManager, family_id: str, post_id: str, exclude: str | None = None
) -> int:
    """Announce a removed post so clients can drop it from the feed."""
    return _publish(
        manager,
        family_topic(family_id),
        EventType.POST_DELETED,
        {"id": post_id, "family_id": family_id},
        exclude=exclude,
    )


def publish_comment_created(
    manager: ConnectionManager, comment: CommentRead, exclude: str | None = None
) -> int:
    """Announce a new comment to the post's family."""
    return _publish(
        manager,
        family_topic(comment.family_id),
        EventType.COMMENT_CREATED,
        comment.model_dump(mode="json"),
        exclude=exclude,
    )


def publish_message_received(manager: ConnectionManager, message: MessageRead) -> int:
    """Push a direct message to the recipient's own topic."""
    return _publish(
        manager,
        user_topic(message.recipient_id),
        EventType.MESSAGE_RECEIVED,
        message.model_dump(mode="json"),
    )
