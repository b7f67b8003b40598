# taste_trail/domains/social/service.py
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.exceptions import Conflict, NotFound, ValidationFailed
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import ProfileOut, UserSummary
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.reviews import repository as review_repository
from taste_trail.shared.utils.logger import get_logger
from . import repository
from .schemas import FollowStatus, UpdateProfileRequest

logger = get_logger(__name__)


class SocialService:
    async def follow(self, db: AsyncSession, follower: User, target_id: str) -> FollowStatus:
        if follower.id == target_id:
            raise ValidationFailed("You cannot follow yourself")
        target = await auth_repository.get_user_by_id(db, target_id)
        if not target:
            raise NotFound("User")

        follower_id, follower_name = follower.id, follower.name
        try:
            await repository.create_follow(db, follower_id, target_id)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("Already following this user")

        await notification_service.notify(
            "follow",
            target_id,
            from_id=follower_id,
            data={"follower_name": follower_name},
        )
        return await self.status(db, follower_id, target_id)

    async def unfollow(self, db: AsyncSession, follower: User, target_id: str) -> FollowStatus:
        removed = await repository.delete_follow(db, follower.id, target_id)
        if not removed:
            raise NotFound("Follow")
        await db.commit()
        return await self.status(db, follower.id, target_id)

    async def status(self, db: AsyncSession, viewer_id: Optional[str], target_id: str) -> FollowStatus:
        counts = await repository.get_follow_counts(db, target_id)
        following = bool(viewer_id) and await repository.is_following(db, viewer_id, target_id)
        return FollowStatus(
            is_following=following,
            followers_count=counts["followersCount"],
            following_count=counts["followingCount"],
        )

    async def get_profile(self, db: AsyncSession, user_id: str, viewer: Optional[User]) -> dict:
        user = await auth_repository.get_user_by_id(db, user_id)
        if not user:
            raise NotFound("User")
        profile = await auth_repository.get_profile(db, user_id)
        follow = await self.status(db, viewer.id if viewer else None, user_id)
        return {
            "user": UserSummary.model_validate(user),
            "profile": ProfileOut.model_validate(profile) if profile else None,
            "reviewCount": await review_repository.count_user_reviews(db, user_id),
            **follow.model_dump(by_alias=True),
        }

    async def update_profile(self, db: AsyncSession, user: User, data: UpdateProfileRequest) -> dict:
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            user.name = changes.pop("name").strip()
        if "avatar" in changes:
            user.avatar = changes.pop("avatar")
        profile = await auth_repository.get_or_create_profile(db, user.id)
        for field, value in changes.items():
            setattr(profile, field, value)
        await db.commit()
        return {"user": UserSummary.model_validate(user), "profile": ProfileOut.model_validate(profile)}


social_service = SocialService()
