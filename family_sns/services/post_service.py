"""Post service - family feed, likes and comments.

Every read is scoped by family_id: a post outside the caller's family is
reported as not found. Like and comment counts are computed from the rows
at query time, so they always equal the number of surviving rows.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from family_sns.core.exceptions import (
    EmptyContent,
    EmptyPost,
    NotAuthorized,
    PostNotFound,
    UserNotFound,
)
from family_sns.db.enums import NotificationType
from family_sns.db.models import Comment, Like, Post, User
from family_sns.schemas.post import CommentRead, PostRead
from family_sns.services import notification_service

logger = logging.getLogger(__name__)

COMMENT_PREVIEW_CHARS = 100


@dataclass
class LikeToggleResult:
    liked: bool
    likes_count: int


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# Query helpers
# =============================================================================

def _likes_count_subquery():
    return (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _comments_count_subquery():
    return (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _post_rows_query(db: Session):
    """Posts joined with author display fields and derived counts."""
    return db.query(
        Post,
        User.name,
        User.avatar,
        _likes_count_subquery().label("likes_count"),
        _comments_count_subquery().label("comments_count"),
    ).outerjoin(User, Post.user_id == User.id)


def _to_post_read(row) -> PostRead:
    post, user_name, user_avatar, likes_count, comments_count = row
    return PostRead(
        id=post.id,
        user_id=post.user_id,
        family_id=post.family_id,
        content=post.content,
        image_url=post.image_url,
        user_name=user_name,
        user_avatar=user_avatar,
        likes_count=likes_count or 0,
        comments_count=comments_count or 0,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def _to_comment_read(comment: Comment, family_id: str) -> CommentRead:
    return CommentRead(
        id=comment.id,
        post_id=comment.post_id,
        family_id=family_id,
        user_id=comment.user_id,
        content=comment.content,
        user_name=comment.author.name if comment.author else None,
        user_avatar=comment.author.avatar if comment.author else None,
        created_at=comment.created_at,
    )


def get_visible_post(db: Session, post_id: str, family_id: str) -> Post:
    """Get a post by ID (family-scoped)."""
    post = db.get(Post, post_id)
    if not post or post.family_id != family_id:
        raise PostNotFound()
    return post


def get_post_read(db: Session, post_id: str) -> PostRead:
    row = _post_rows_query(db).filter(Post.id == post_id).first()
    if row is None:
        raise PostNotFound()
    return _to_post_read(row)


def count_likes(db: Session, post_id: str) -> int:
    return db.query(func.count(Like.id)).filter(Like.post_id == post_id).scalar() or 0


# =============================================================================
# Posts
# =============================================================================

def list_posts(db: Session, family_id: str, page: int, limit: int) -> list[PostRead]:
    """List a family's posts, newest first, offset-paginated."""
    offset = (page - 1) * limit
    rows = (
        _post_rows_query(db)
        .filter(Post.family_id == family_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [_to_post_read(row) for row in rows]


def create_post(
    db: Session,
    author_id: str,
    content: str | None = None,
    image_url: str | None = None,
) -> PostRead:
    """
    Publish a post to the author's family feed.

    Requires text or an image. family_id is copied from the author.
    """
    content = _clean(content)
    image_url = _clean(image_url)
    if not content and not image_url:
        raise EmptyPost()

    author = db.get(User, author_id)
    if not author:
        raise UserNotFound()

    post = Post(
        user_id=author.id,
        family_id=author.family_id,
        content=content,
        image_url=image_url,
    )
    db.add(post)
    db.commit()

    logger.info("User %s created post %s in family %s", author.id, post.id, post.family_id)
    return get_post_read(db, post.id)


def delete_post(db: Session, post_id: str, user_id: str, family_id: str) -> Post:
    """
    Delete a post with its likes and comments.

    Requires: author
    """
    post = get_visible_post(db, post_id, family_id)
    if post.user_id != user_id:
        raise NotAuthorized("Not authorized to delete this post")

    db.delete(post)
    db.commit()

    logger.info("User %s deleted post %s", user_id, post_id)
    return post


# =============================================================================
# Likes
# =============================================================================

def _find_like(db: Session, post_id: str, user_id: str) -> Like | None:
    return db.query(Like).filter(
        Like.post_id == post_id,
        Like.user_id == user_id,
    ).first()


def toggle_like(db: Session, post_id: str, user_id: str, family_id: str) -> LikeToggleResult:
    """
    Like a post, or remove an existing like.

    UNIQUE(user_id, post_id) decides concurrent toggles: when another
    request inserted the same like first, the insert fails and the post is
    simply reported as liked.
    """
    get_visible_post(db, post_id, family_id)

    existing = _find_like(db, post_id, user_id)
    if existing:
        db.delete(existing)
        db.commit()
        return LikeToggleResult(liked=False, likes_count=count_likes(db, post_id))

    db.add(Like(user_id=user_id, post_id=post_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Only the duplicate-like race is benign; a vanished post is not
        if _find_like(db, post_id, user_id) is None:
            raise PostNotFound()
        logger.info("Duplicate like on post %s by user %s treated as liked", post_id, user_id)

    return LikeToggleResult(liked=True, likes_count=count_likes(db, post_id))


# =============================================================================
# Comments
# =============================================================================

def list_comments(db: Session, post_id: str, family_id: str) -> list[CommentRead]:
    """List comments on a post, oldest first."""
    get_visible_post(db, post_id, family_id)

    comments = db.query(Comment).filter(
        Comment.post_id == post_id,
    ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()
    return [_to_comment_read(c, family_id) for c in comments]


def add_comment(
    db: Session,
    post_id: str,
    user_id: str,
    family_id: str,
    content: str | None,
) -> CommentRead:
    """
    Add a comment to a post.

    The post author gets a durable notification unless commenting on
    their own post. Comment and notification commit together.
    """
    content = _clean(content)
    if not content:
        raise EmptyContent("Comment must not be empty")

    post = get_visible_post(db, post_id, family_id)

    comment = Comment(post_id=post.id, user_id=user_id, content=content)
    db.add(comment)
    db.flush()

    if post.user_id != user_id:
        commenter = db.get(User, user_id)
        notification_service.create_notification(
            db=db,
            user_id=post.user_id,
            type=NotificationType.COMMENT,
            title=f"{commenter.name if commenter else 'Someone'} commented on your post",
            message=content[:COMMENT_PREVIEW_CHARS],
            data={"post_id": post.id, "comment_id": comment.id},
        )

    db.commit()
    db.refresh(comment)

    logger.info("User %s commented on post %s", user_id, post.id)
    return _to_comment_read(comment, post.family_id)
