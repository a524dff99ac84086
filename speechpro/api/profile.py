"""User profile routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.auth.security import require_read_scope, require_write_scope
from speechpro.db.models import ApiKey
from speechpro.db.session import get_db
from speechpro.schemas.schemas import UserProfileResponse, UserProfileUpdate
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(prefix="/v1/profile", tags=["Profile"])


@router.put(
    "",
    response_model=UserProfileResponse,
    summary="Create or update profile",
    description="Store the caller's email and display name. Emails are unique.",
)
async def save_profile(
    body: UserProfileUpdate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Create or update the caller's profile."""
    profile = await store.save_user(db, api_key.user_id, body.email, body.display_name)
    return UserProfileResponse.model_validate(profile)


@router.get(
    "",
    response_model=UserProfileResponse,
    summary="Get profile",
)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Get the caller's profile."""
    profile = await store.get_user(db, api_key.user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return UserProfileResponse.model_validate(profile)
