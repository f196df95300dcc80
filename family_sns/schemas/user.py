"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from family_sns.db.enums import Role


class FamilyMemberRead(BaseModel):
    """Member list entry."""

    id: str
    name: str
    email: str
    role: Role
    avatar: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class FamilyMemberListResponse(BaseModel):
    users: list[FamilyMemberRead]


class ProfileRead(FamilyMemberRead):
    """Profile view including the family name."""

    family_id: str
    family_name: str | None = None


class ProfileResponse(BaseModel):
    user: ProfileRead


class ProfileUpdate(BaseModel):
    """Request schema for updating the caller's profile."""

    name: str = Field(..., min_length=1, max_length=255)
    avatar: str | None = Field(None, max_length=500)
    user_id: str | None = Field(None, validation_alias=AliasChoices("user_id", "userId"))


class ProfileUpdatedResponse(BaseModel):
    message: str
    user: ProfileRead
