"""User service - family member listing and profiles."""

from sqlalchemy.orm import Session, joinedload

from family_sns.core.exceptions import UserNotFound, ValidationError
from family_sns.db.models import User
from family_sns.schemas.user import FamilyMemberRead, ProfileRead


def get_user_by_id(db: Session, user_id: str) -> User | None:
    """Get user by ID."""
    return db.query(User).options(joinedload(User.family)).filter(User.id == user_id).first()


def to_profile_read(user: User) -> ProfileRead:
    return ProfileRead(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        avatar=user.avatar,
        created_at=user.created_at,
        family_id=user.family_id,
        family_name=user.family.name if user.family else None,
    )


def list_family_members(db: Session, family_id: str) -> list[FamilyMemberRead]:
    """Active members of a family in join order."""
    users = db.query(User).filter(
        User.family_id == family_id,
        User.is_active.is_(True),
    ).order_by(User.created_at.asc(), User.id.asc()).all()
    return [FamilyMemberRead.model_validate(u) for u in users]


def get_profile(db: Session, user_id: str) -> ProfileRead:
    user = get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise UserNotFound()
    return to_profile_read(user)


def update_profile(
    db: Session,
    user_id: str,
    name: str,
    avatar: str | None = None,
) -> ProfileRead:
    """
    Update the display name and avatar.

    A blank avatar clears it.
    """
    user = get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise UserNotFound()

    name = name.strip()
    if not name:
        raise ValidationError("Name is required")

    user.name = name
    user.avatar = (avatar or "").strip() or None
    db.commit()
    db.refresh(user)
    return to_profile_read(user)
