"""Pydantic schemas for direct messages."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class MessageCreate(BaseModel):
    """Request to send a direct message."""

    recipient_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("recipient_id", "recipientId"),
    )
    content: str | None = Field(None, max_length=5000)
    sender_id: str | None = Field(None, validation_alias=AliasChoices("sender_id", "senderId"))


class MessageRead(BaseModel):
    """Message with sender/recipient display fields."""

    id: str
    sender_id: str
    recipient_id: str
    content: str
    is_read: bool
    sender_name: str | None = None
    sender_avatar: str | None = None
    recipient_name: str | None = None
    recipient_avatar: str | None = None
    created_at: datetime


class MessageListResponse(BaseModel):
    messages: list[MessageRead]


class MessageSentResponse(BaseModel):
    message: str
    data: MessageRead
