"""Posts router - family feed, likes and comments."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from family_sns.core.deps import (
    get_connection_id,
    get_current_session,
    get_db,
    require_family_access,
    require_same_actor,
)
from family_sns.core.websocket import ConnectionManager, get_connection_manager
from family_sns.schemas.auth import UserSession
from family_sns.schemas.post import (
    CommentCreate,
    CommentCreatedResponse,
    CommentListResponse,
    LikeToggleResponse,
    PostCreate,
    PostCreatedResponse,
    PostListResponse,
)
from family_sns.services import post_service, realtime_events
from family_sns.utils.pagination import PaginationParams, get_pagination

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("", response_model=PostListResponse)
def list_posts(
    family_id: str = Query(..., alias="familyId", min_length=1, max_length=64),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List a family's feed, newest first."""
    require_family_access(session, family_id)
    posts = post_service.list_posts(db, family_id, pagination.page, pagination.limit)
    return PostListResponse(posts=posts, page=pagination.page, limit=pagination.limit)


@router.post("", response_model=PostCreatedResponse, status_code=201)
def create_post(
    data: PostCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    manager: ConnectionManager = Depends(get_connection_manager),
    connection_id: str | None = Depends(get_connection_id),
):
    require_same_actor(session, data.user_id)
    post = post_service.create_post(
        db,
        author_id=session.user_id,
        content=data.content,
        image_url=data.image_url,
    )
    realtime_events.publish_post_created(manager, post, exclude=connection_id)
    return PostCreatedResponse(message="Post created successfully", post=post)


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    manager: ConnectionManager = Depends(get_connection_manager),
    connection_id: str | None = Depends(get_connection_id),
):
    """Delete a post (author only). Likes and comments go with it."""
    post_service.delete_post(db, post_id, session.user_id, session.family_id)
    realtime_events.publish_post_deleted(
        manager, session.family_id, post_id, exclude=connection_id
    )
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
def toggle_like(
    post_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    result = post_service.toggle_like(db, post_id, session.user_id, session.family_id)
    return LikeToggleResponse(
        message="Post liked" if result.liked else "Post unliked",
        liked=result.liked,
        likes_count=result.likes_count,
    )


@router.get("/{post_id}/comments", response_model=CommentListResponse)
def list_comments(
    post_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    comments = post_service.list_comments(db, post_id, session.family_id)
    return CommentListResponse(comments=comments)


@router.post("/{post_id}/comments", response_model=CommentCreatedResponse, status_code=201)
def add_comment(
    post_id: str,
    data: CommentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    manager: ConnectionManager = Depends(get_connection_manager),
    connection_id: str | None = Depends(get_connection_id),
):
    require_same_actor(session, data.user_id)
    comment = post_service.add_comment(
        db,
        post_id=post_id,
        user_id=session.user_id,
        family_id=session.family_id,
        content=data.content,
    )
    realtime_events.publish_comment_created(manager, comment, exclude=connection_id)
    return CommentCreatedResponse(message="Comment added successfully", comment=comment)
