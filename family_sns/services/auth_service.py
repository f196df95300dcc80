"""Authentication service - family registration, joining, login and credential checks."""

import logging
from dataclasses import dataclass

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from family_sns.core.exceptions import (
    DuplicateEmail,
    FamilyNotFound,
    InvalidCredentials,
    InvalidToken,
    UserNotFound,
)
from family_sns.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    password_needs_rehash,
    verify_password,
)
from family_sns.db.enums import Role
from family_sns.db.models import Family, User
from family_sns.schemas.auth import UserPublic

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Credential plus the public view of the authenticated user."""
    token: str
    user: UserPublic


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_user_public(user: User) -> UserPublic:
    """Convert User model to its public view."""
    return UserPublic(
        id=user.id,
        email=user.email,
        name=user.name,
        role=Role(user.role),
        family_id=user.family_id,
        family_name=user.family.name if user.family else None,
        avatar=user.avatar,
    )


def issue_credential(user: User) -> str:
    """Sign a credential carrying the user's identity claims."""
    return create_access_token(
        user_id=user.id,
        family_id=user.family_id,
        email=user.email,
        role=user.role,
    )


def email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == normalize_email(email)).first() is not None


def _commit_new_user(db: Session, email: str) -> None:
    """
    Commit a pending user insert.

    The UNIQUE(email) constraint is the authoritative guard: a racing
    registration that slipped past the pre-check surfaces here.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if email_exists(db, email):
            raise DuplicateEmail() from exc
        raise


# =============================================================================
# Operations
# =============================================================================

def register_family_admin(
    db: Session,
    email: str,
    password: str,
    name: str,
    family_name: str,
) -> AuthResult:
    """
    Create a new family and its first member as admin.

    Family and user are committed together; neither exists without the other.
    """
    email = normalize_email(email)
    if email_exists(db, email):
        raise DuplicateEmail()

    family = Family(name=family_name.strip())
    user = User(
        family=family,
        email=email,
        password_hash=hash_password(password),
        name=name.strip(),
        role=Role.ADMIN.value,
    )
    db.add_all([family, user])
    _commit_new_user(db, email)
    db.refresh(user)

    logger.info("Registered family %s with admin user %s", family.id, user.id)
    return AuthResult(token=issue_credential(user), user=to_user_public(user))


def join_family(
    db: Session,
    email: str,
    password: str,
    name: str,
    family_code: str,
) -> AuthResult:
    """Create a member account in an existing family (invite code = family id)."""
    family = db.get(Family, family_code.strip())
    if not family:
        raise FamilyNotFound()

    email = normalize_email(email)
    if email_exists(db, email):
        raise DuplicateEmail()

    user = User(
        family_id=family.id,
        email=email,
        password_hash=hash_password(password),
        name=name.strip(),
        role=Role.MEMBER.value,
    )
    db.add(user)
    _commit_new_user(db, email)
    db.refresh(user)

    logger.info("User %s joined family %s", user.id, family.id)
    return AuthResult(token=issue_credential(user), user=to_user_public(user))


def login(db: Session, email: str, password: str) -> AuthResult:
    """
    Authenticate by email and password.

    Unknown email, inactive account and wrong password are indistinguishable
    to the caller.
    """
    user = db.query(User).options(joinedload(User.family)).filter(
        User.email == normalize_email(email)
    ).first()

    stored_hash = user.password_hash if user and user.is_active else None
    if not verify_password(password, stored_hash):
        raise InvalidCredentials()

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        db.commit()
        db.refresh(user)

    return AuthResult(token=issue_credential(user), user=to_user_public(user))


def verify_credential(db: Session, token: str) -> UserPublic:
    """
    Validate a credential and resolve its subject.

    Raises:
        InvalidToken: malformed, expired, tampered, or inconsistent claims
        UserNotFound: subject no longer exists or is deactivated
    """
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        raise InvalidToken()

    user = db.query(User).options(joinedload(User.family)).filter(
        User.id == str(payload["sub"])
    ).first()
    if not user or not user.is_active:
        raise UserNotFound()

    if user.family_id != payload.get("family_id"):
        raise InvalidToken()

    return to_user_public(user)
