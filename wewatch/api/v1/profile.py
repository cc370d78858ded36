"""Profile endpoints — household members of the current account."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from wewatch.deps import CurrentUser, DbSession
from wewatch.models.profile import Profile
from wewatch.models.user import User
from wewatch.schemas.profile import ProfileRead, ProfileUpdate

router = APIRouter()


@router.get("", response_model=ProfileRead)
async def get_profile(user: CurrentUser, db: DbSession) -> Profile:
    """Get the caller's profile, creating it with the nickname as sole member."""
    result = await db.execute(select(Profile).where(Profile.user_id == user.user_id))
    profile = result.scalar_one_or_none()
    if profile:
        return profile

    owner = await db.execute(select(User.nickname).where(User.id == user.user_id))
    nickname = owner.scalar_one_or_none()
    if nickname is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    profile = Profile(user_id=user.user_id, members=[nickname], additional_info=None)
    db.add(profile)
    await db.flush()
    await db.refresh(profile)
    return profile


@router.put("", response_model=ProfileRead)
async def update_profile(data: ProfileUpdate, user: CurrentUser, db: DbSession) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == user.user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    fields = data.model_fields_set
    if "members" in fields and data.members is not None:
        profile.members = data.members
    if "additional_info" in fields:
        profile.additional_info = data.additional_info

    await db.flush()
    await db.refresh(profile)
    return profile
