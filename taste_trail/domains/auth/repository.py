from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Profile, Session, User


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[str]) -> dict:
    ids = {i for i in user_ids if i}
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in result.scalars().all()}


async def get_user_ids_by_roles(db: AsyncSession, roles: Iterable[str]) -> List[str]:
    result = await db.execute(select(User.id).where(User.role.in_(list(roles))))
    return list(result.scalars().all())


async def get_profile(db: AsyncSession, user_id: str) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_profile(db: AsyncSession, user_id: str) -> Profile:
    profile = await get_profile(db, user_id)
    if profile is None:
        profile = Profile(user_id=user_id, dietary_prefs=[], social_links={})
        db.add(profile)
        await db.flush()
    return profile


async def search_users(
    db: AsyncSession,
    role: Optional[str],
    search: Optional[str],
    offset: int,
    limit: int,
) -> tuple[List[User], int]:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.order_by(User.created_at.desc()).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def count_users_by_role(db: AsyncSession) -> dict:
    result = await db.execute(select(User.role, func.count()).group_by(User.role))
    return {role: count for role, count in result.all()}


async def create_session(db: AsyncSession, user_id: str, refresh_token: str, expires_at: datetime) -> Session:
    session = Session(user_id=user_id, refresh_token=refresh_token, expires_at=expires_at)
    db.add(session)
    await db.flush()
    return session


async def get_session_by_token(db: AsyncSession, refresh_token: str) -> Optional[Session]:
    result = await db.execute(select(Session).where(Session.refresh_token == refresh_token))
    return result.scalar_one_or_none()


async def delete_session_by_token(db: AsyncSession, refresh_token: str) -> int:
    result = await db.execute(delete(Session).where(Session.refresh_token == refresh_token))
    return result.rowcount or 0


async def delete_expired_sessions(db: AsyncSession, now: datetime) -> int:
    result = await db.execute(delete(Session).where(Session.expires_at < now))
    return result.rowcount or 0


async def get_user_ids(db: AsyncSession, roles: Optional[Iterable[str]] = None, verified: Optional[bool] = None) -> List[str]:
    query = select(User.id)
    if roles:
        query = query.where(User.role.in_(list(roles)))
    if verified is not None:
        query = query.where(User.verified.is_(verified))
    result = await db.execute(query.order_by(User.created_at))
    return list(result.scalars().all())
