"""
WebSocket router for the real-time event channel.

Provides a WebSocket endpoint that:
1. Authenticates the user from the ``token`` query parameter
2. Subscribes the connection to its own user topic
3. Lets the client join/leave its family topic
4. Pushes post, comment and message events as they happen
"""

import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from family_sns.core.config import settings
from family_sns.core.exceptions import AuthenticationError, UserNotFound
from family_sns.core.websocket import family_topic, manager
from family_sns.db.enums import ClientAction, EventType
from family_sns.db.session import SessionLocal
from family_sns.schemas.auth import UserPublic
from family_sns.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["WebSocket"])

CLOSE_UNAUTHENTICATED = 4001
CLOSE_FORBIDDEN_ORIGIN = 4003


def _origin_is_allowed(origin: str | None, *, allowed: set[str], is_dev: bool) -> bool:
    if is_dev:
        return True
    if not origin:
        return False
    return origin in allowed


def _authenticate(token: str) -> UserPublic:
    """Verify the credential with a short-lived session (not held for the socket's life)."""
    db = SessionLocal()
    try:
        return auth_service.verify_credential(db, token)
    finally:
        db.close()


def _parse_frame(raw: str) -> tuple[str, object] | None:
    try:
        frame = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        return None
    return frame["type"], frame.get("data")


@router.websocket("/events")
async def websocket_events(
    websocket: WebSocket,
    token: str | None = Query(None),
):
    """
    Real-time event channel.

    Client frames:
    - ``{"type": "join-family", "data": "<family_id>"}``
    - ``{"type": "leave-family", "data": "<family_id>"}``
    - ``ping`` (answered with ``pong``)

    Server frames: ``{"type": "<event>", "data": {...}}``.
    """
    origin = websocket.headers.get("origin")
    if not _origin_is_allowed(
        origin,
        allowed=set(settings.cors_origins_list),
        is_dev=settings.is_dev,
    ):
        logger.warning("Rejected WebSocket from origin %r", origin)
        await websocket.close(code=CLOSE_FORBIDDEN_ORIGIN, reason="Origin not allowed")
        return

    if not token:
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason="Authentication required")
        return

    try:
        user = await run_in_threadpool(_authenticate, token)
    except (AuthenticationError, UserNotFound):
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason="Invalid token")
        return

    connection = await manager.connect(websocket, user.id, user.family_id)
    await websocket.send_text(json.dumps({
        "type": EventType.CONNECTED.value,
        "data": {"connection_id": connection.id},
    }))

    try:
        while True:
            raw = await websocket.receive_text()

            if raw == "ping":
                await websocket.send_text("pong")
                continue

            parsed = _parse_frame(raw)
            if parsed is None:
                logger.warning("Ignoring malformed frame from connection %s", connection.id)
                continue

            action, family_id = parsed
            if action == ClientAction.JOIN_FAMILY.value:
                await manager.subscribe(connection.id, family_topic(str(family_id)))
            elif action == ClientAction.LEAVE_FAMILY.value:
                await manager.unsubscribe(connection.id, family_topic(str(family_id)))
            else:
                logger.warning(
                    "Ignoring unknown frame type %r from connection %s", action, connection.id
                )
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(connection.id)
