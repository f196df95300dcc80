"""Pydantic schemas for posts, likes and comments."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class PostCreate(BaseModel):
    """Request to publish a post. Content or image is required."""

    content: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("image_url", "imageUrl"),
    )
    # Accepted for compatibility; must match the caller when present
    user_id: str | None = Field(None, validation_alias=AliasChoices("user_id", "userId"))


class PostRead(BaseModel):
    """Post with author display fields and derived counts."""

    id: str
    user_id: str
    family_id: str
    content: str | None
    image_url: str | None
    user_name: str | None = None
    user_avatar: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime
    updated_at: datetime


class PostListResponse(BaseModel):
    posts: list[PostRead]
    page: int
    limit: int


class PostCreatedResponse(BaseModel):
    message: str
    post: PostRead


class LikeToggleResponse(BaseModel):
    """Result of toggling a like."""

    message: str
    liked: bool
    likes_count: int


class CommentCreate(BaseModel):
    """Request to add a comment."""

    content: str | None = Field(None, max_length=2000)
    user_id: str | None = Field(None, validation_alias=AliasChoices("user_id", "userId"))


class CommentRead(BaseModel):
    """Comment response."""

    id: str
    post_id: str
    family_id: str
    user_id: str
    content: str
    user_name: str | None = None
    user_avatar: str | None = None
    created_at: datetime


class CommentListResponse(BaseModel):
    comments: list[CommentRead]


class CommentCreatedResponse(BaseModel):
    message: str
    comment: CommentRead
