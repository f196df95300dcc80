"""Users router - family member list and profiles."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from family_sns.core.deps import (
    get_current_session,
    get_db,
    require_family_access,
    require_same_actor,
)
from family_sns.core.exceptions import UserNotFound
from family_sns.schemas.auth import UserSession
from family_sns.schemas.user import (
    FamilyMemberListResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdatedResponse,
)
from family_sns.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/family-members", response_model=FamilyMemberListResponse)
def list_family_members(
    family_id: str = Query(..., alias="familyId", min_length=1, max_length=64),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    require_family_access(session, family_id)
    return FamilyMemberListResponse(users=user_service.list_family_members(db, family_id))


@router.get("/profile/{user_id}", response_model=ProfileResponse)
def get_profile(
    user_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Profile of any member of the caller's family."""
    profile = user_service.get_profile(db, user_id)
    if profile.family_id != session.family_id:
        raise UserNotFound()
    return ProfileResponse(user=profile)


@router.put("/profile", response_model=ProfileUpdatedResponse)
def update_profile(
    data: ProfileUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    require_same_actor(session, data.user_id)
    profile = user_service.update_profile(db, session.user_id, name=data.name, avatar=data.avatar)
    return ProfileUpdatedResponse(message="Profile updated successfully", user=profile)
