from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.domains.auth.models import User
from .models import Follow


async def create_follow(db: AsyncSession, follower_id: str, following_id: str) -> Follow:
    follow = Follow(follower_id=follower_id, following_id=following_id)
    db.add(follow)
    await db.flush()
    return follow


async def delete_follow(db: AsyncSession, follower_id: str, following_id: str) -> int:
    result = await db.execute(
        delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    )
    return result.rowcount or 0


async def is_following(db: AsyncSession, follower_id: str, following_id: str) -> bool:
    result = await db.execute(
        select(Follow.id).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    )
    return result.first() is not None


async def get_follow_counts(db: AsyncSession, user_id: str) -> dict:
    followers = await db.scalar(select(func.count()).where(Follow.following_id == user_id))
    following = await db.scalar(select(func.count()).where(Follow.follower_id == user_id))
    return {"followersCount": followers or 0, "followingCount": following or 0}


async def get_following_ids(db: AsyncSession, user_id: str) -> List[str]:
    result = await db.execute(select(Follow.following_id).where(Follow.follower_id == user_id))
    return list(result.scalars().all())


async def list_followers(db: AsyncSession, user_id: str, offset: int, limit: int) -> tuple[List[User], int]:
    total = await db.scalar(select(func.count()).where(Follow.following_id == user_id))
    result = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def list_following(db: AsyncSession, user_id: str, offset: int, limit: int) -> tuple[List[User], int]:
    total = await db.scalar(select(func.count()).where(Follow.follower_id == user_id))
    result = await db.execute(
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0
