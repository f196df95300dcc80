"""SQLAlchemy ORM models for families, members, the feed and messaging."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, ForeignKey, Index, String, Text, UniqueConstraint,
    false, text, true
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_sns.db.base import Base
from family_sns.db.enums import Role


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    # App-side timestamps keep microsecond ordering on every backend
    return datetime.now(timezone.utc)


# =============================================================================
# Tenancy
# =============================================================================

class Family(Base):
    """
    A family group - the tenancy boundary.

    Every user, post and feed query is scoped by family_id.
    The family id doubles as the invite code for joining.
    """
    __tablename__ = "families"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    members: Mapped[list["User"]] = relationship(back_populates="family")


class User(Base):
    """
    Family member.

    A user belongs to exactly one family for its lifetime.
    Constraint: UNIQUE(email) across all families.
    """
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_family_id", "family_id"),
        CheckConstraint("role IN ('admin', 'member')", name="ck_users_role_valid"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    family_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("families.id", ondelete="RESTRICT"),
        nullable=False
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20),
        default=Role.MEMBER.value,
        server_default=text("'member'"),
        nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=true(),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    family: Mapped["Family"] = relationship(back_populates="members")


# =============================================================================
# Feed
# =============================================================================

class Post(Base):
    """
    A feed entry visible to the author's family.

    family_id is a denormalized copy of the author's family.
    Like/comment counts are derived at query time, never stored.
    """
    __tablename__ = "posts"
    __table_args__ = (
        Index("idx_posts_family_created", "family_id", "created_at"),
        Index("idx_posts_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    family_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    author: Mapped["User"] = relationship()
    likes: Mapped[list["Like"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan"
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at"
    )


class Like(Base):
    """
    One user's like on one post.

    Constraint: UNIQUE(user_id, post_id) - the final arbiter for
    concurrent toggles.
    """
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
        Index("idx_likes_post_id", "post_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    # Relationships
    post: Mapped["Post"] = relationship(back_populates="likes")


class Comment(Base):
    """Comment on a post, displayed oldest first."""
    __tablename__ = "comments"
    __table_args__ = (
        Index("idx_comments_post_created", "post_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    author: Mapped["User"] = relationship()
    post: Mapped["Post"] = relationship(back_populates="comments")


# =============================================================================
# Messaging
# =============================================================================

class Message(Base):
    """Direct one-to-one message."""
    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_recipient_unread", "recipient_id", "is_read"),
        Index("idx_messages_pair", "sender_id", "recipient_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    # Relationships
    sender: Mapped["User"] = relationship(foreign_keys=[sender_id])
    recipient: Mapped["User"] = relationship(foreign_keys=[recipient_id])


class Notification(Base):
    """
    Durable record of an event addressed to a user.

    Written whether or not the user has a live connection.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notif_user_unread", "user_id", "is_read", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship()
