from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationPreference


async def recent_duplicate_exists(
    db: AsyncSession,
    notification_type: str,
    user_id: str,
    from_id: Optional[str],
    review_id: Optional[str],
    comment_id: Optional[str],
    since: datetime,
) -> bool:
    def _match(column, value):
        return column.is_(None) if value is None else column == value

    result = await db.execute(
        select(Notification.id)
        .where(
            Notification.type == notification_type,
            Notification.user_id == user_id,
            _match(Notification.from_id, from_id),
            _match(Notification.review_id, review_id),
            _match(Notification.comment_id, comment_id),
            Notification.created_at >= since,
        )
        .limit(1)
    )
    return result.first() is not None


async def list_notifications(
    db: AsyncSession, user_id: str, unread_only: bool, offset: int, limit: int
) -> tuple[List[Notification], int]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def count_unread(db: AsyncSession, user_id: str) -> int:
    return await db.scalar(
        select(func.count()).where(Notification.user_id == user_id, Notification.read.is_(False))
    ) or 0


async def mark_read(db: AsyncSession, user_id: str, ids: Optional[List[str]] = None) -> int:
    stmt = update(Notification).where(Notification.user_id == user_id, Notification.read.is_(False))
    if ids:
        stmt = stmt.where(Notification.id.in_(ids))
    result = await db.execute(stmt.values(read=True))
    return result.rowcount or 0


async def count_by_type(db: AsyncSession, user_id: Optional[str] = None) -> dict:
    query = select(Notification.type, func.count()).group_by(Notification.type)
    if user_id:
        query = query.where(Notification.user_id == user_id)
    result = await db.execute(query)
    return {t: c for t, c in result.all()}


async def count_notifications(
    db: AsyncSession,
    user_id: Optional[str] = None,
    since: Optional[datetime] = None,
    unread_only: bool = False,
) -> int:
    query = select(func.count()).select_from(Notification)
    if user_id:
        query = query.where(Notification.user_id == user_id)
    if since:
        query = query.where(Notification.created_at >= since)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    return await db.scalar(query) or 0


async def latest_of_type(db: AsyncSession, notification_type: str, limit: int) -> List[Notification]:
    result = await db.execute(
        select(Notification)
        .where(Notification.type == notification_type)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def delete_read_before(db: AsyncSession, before: datetime) -> int:
    result = await db.execute(
        delete(Notification).where(Notification.read.is_(True), Notification.created_at < before)
    )
    return result.rowcount or 0


async def get_preferences(db: AsyncSession, user_id: str) -> Optional[NotificationPreference]:
    return await db.get(NotificationPreference, user_id)


async def get_or_create_preferences(db: AsyncSession, user_id: str) -> NotificationPreference:
    prefs = await get_preferences(db, user_id)
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id, push_enabled=True, email_enabled=True)
        db.add(prefs)
        await db.flush()
    return prefs


async def push_disabled_users(db: AsyncSession, user_ids: Iterable[str]) -> set:
    ids = list(set(user_ids))
    if not ids:
        return set()
    result = await db.execute(
        select(NotificationPreference.user_id).where(
            NotificationPreference.user_id.in_(ids),
            NotificationPreference.push_enabled.is_(False),
        )
    )
    return set(result.scalars().all())
