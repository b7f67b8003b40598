# taste_trail/domains/social/api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.auth.dependencies import get_current_user, get_optional_user
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.shared.schemas.base import page_offset, paginated
from . import repository
from .schemas import UpdateProfileRequest
from .service import social_service

router = APIRouter()


@router.put("/profile")
async def update_profile(
    data: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.update_profile(db, user, data)


@router.get("/{user_id}")
async def get_user_profile(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_profile(db, user_id, viewer)


@router.post("/{user_id}/follow")
async def follow_user(user_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await social_service.follow(db, user, user_id)


@router.delete("/{user_id}/follow")
async def unfollow_user(user_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await social_service.unfollow(db, user, user_id)


@router.get("/{user_id}/follow")
async def follow_status(user_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await social_service.status(db, user.id, user_id)


@router.get("/{user_id}/followers")
async def list_followers(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    users, total = await repository.list_followers(db, user_id, page_offset(page, limit), limit)
    return paginated("users", [UserSummary.model_validate(u) for u in users], page, limit, total)


@router.get("/{user_id}/following")
async def list_following(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    users, total = await repository.list_following(db, user_id, page_offset(page, limit), limit)
    return paginated("users", [UserSummary.model_validate(u) for u in users], page, limit, total)
