"""Authentication-related Pydantic schemas."""

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from family_sns.core.config import settings
from family_sns.db.enums import Role


class UserSession(BaseModel):
    """
    Identity context for authenticated requests.

    Returned by the get_current_session dependency and consumed by every
    protected endpoint for authorization checks.
    """
    user_id: str
    family_id: str
    role: Role
    email: str
    name: str


class UserPublic(BaseModel):
    """Public view of a user (never includes the password hash)."""
    id: str
    email: str
    name: str
    role: Role
    family_id: str
    family_name: str | None = None
    avatar: str | None = None


class _Credentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class _NewMember(_Credentials):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        if len(value) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class RegisterRequest(_NewMember):
    """Create a new family with the caller as its admin."""
    family_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("family_name", "familyName"),
    )

    @field_validator("family_name")
    @classmethod
    def strip_family_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Family name is required")
        return value


class JoinFamilyRequest(_NewMember):
    """Join an existing family using its invite code (the family id)."""
    family_code: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("family_code", "familyCode"),
    )


class LoginRequest(_Credentials):
    """Email/password login."""


class AuthResponse(BaseModel):
    """Returned by register, join-family and login."""
    message: str
    token: str
    user: UserPublic


class VerifyResponse(BaseModel):
    """Response for GET /auth/verify."""
    user: UserPublic
