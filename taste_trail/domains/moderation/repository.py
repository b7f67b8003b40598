# taste_trail/domains/moderation/repository.py
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .entities import BAN_ACTIONS, ReportStatus, is_ban_active
from .models import ContentFlag, ModerationAction, Report, UserStrike


async def create_report(
    db: AsyncSession,
    reporter_id: str,
    report_type: str,
    target_id: str,
    reason: str,
    description: Optional[str],
) -> Report:
    report = Report(
        reporter_id=reporter_id,
        type=report_type,
        target_id=target_id,
        reason=reason,
        description=description,
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    await db.flush()
    return report


async def get_report(db: AsyncSession, report_id: str) -> Optional[Report]:
    return await db.get(Report, report_id)


async def list_reports(
    db: AsyncSession,
    offset: int,
    limit: int,
    status: Optional[str] = None,
    reporter_id: Optional[str] = None,
) -> tuple[List[Report], int]:
    query = select(Report)
    if status:
        query = query.where(Report.status == status)
    if reporter_id:
        query = query.where(Report.reporter_id == reporter_id)
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.order_by(Report.created_at.desc()).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def transition_report(
    db: AsyncSession,
    report_id: str,
    from_statuses: Iterable[str],
    to_status: str,
    **values,
) -> bool:
    """Compare-and-set on status; False means another moderator got there first."""
    result = await db.execute(
        update(Report)
        .where(Report.id == report_id, Report.status.in_(list(from_statuses)))
        .values(status=to_status, updated_at=datetime.utcnow(), **values)
        .execution_options(synchronize_session="fetch")
    )
    return (result.rowcount or 0) == 1


def open_report_targets(report_type: str, statuses: Iterable[str]):
    """Subquery of target ids with an open report of the given type."""
    return select(Report.target_id).where(
        Report.type == report_type, Report.status.in_(list(statuses))
    )


async def count_reports(db: AsyncSession, status: Optional[str] = None) -> int:
    query = select(func.count()).select_from(Report)
    if status:
        query = query.where(Report.status == status)
    return await db.scalar(query) or 0


async def get_flag(db: AsyncSession, content_id: str, content_type: str) -> Optional[ContentFlag]:
    result = await db.execute(
        select(ContentFlag).where(
            ContentFlag.content_id == content_id, ContentFlag.content_type == content_type
        )
    )
    return result.scalar_one_or_none()


async def upsert_flag(
    db: AsyncSession, content_id: str, content_type: str, reason: str, severity: int
) -> ContentFlag:
    flag = await get_flag(db, content_id, content_type)
    if flag is None:
        flag = ContentFlag(
            content_id=content_id,
            content_type=content_type,
            reason=reason,
            severity=severity,
            report_count=1,
        )
        db.add(flag)
    else:
        flag.report_count = (flag.report_count or 0) + 1
        if severity > flag.severity:
            flag.severity = severity
            flag.reason = reason
    await db.flush()
    return flag


async def delete_flag(db: AsyncSession, content_id: str, content_type: str) -> int:
    result = await db.execute(
        delete(ContentFlag).where(
            ContentFlag.content_id == content_id, ContentFlag.content_type == content_type
        )
    )
    return result.rowcount or 0


async def list_flags(db: AsyncSession, offset: int, limit: int) -> tuple[List[ContentFlag], int]:
    total = await db.scalar(select(func.count()).select_from(ContentFlag))
    result = await db.execute(
        select(ContentFlag)
        .order_by(ContentFlag.severity.desc(), ContentFlag.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def create_action(
    db: AsyncSession,
    moderator_id: str,
    target_id: str,
    target_type: str,
    action: str,
    reason: str,
    expires_at: Optional[datetime] = None,
    report_id: Optional[str] = None,
) -> ModerationAction:
    record = ModerationAction(
        moderator_id=moderator_id,
        target_id=target_id,
        target_type=target_type,
        action=action,
        reason=reason,
        expires_at=expires_at,
        report_id=report_id,
    )
    db.add(record)
    await db.flush()
    return record


async def list_actions(db: AsyncSession, offset: int, limit: int) -> tuple[List[ModerationAction], int]:
    total = await db.scalar(select(func.count()).select_from(ModerationAction))
    result = await db.execute(
        select(ModerationAction).order_by(ModerationAction.created_at.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def get_active_ban(
    db: AsyncSession, user_id: str, now: Optional[datetime] = None
) -> Optional[ModerationAction]:
    now = now or datetime.utcnow()
    result = await db.execute(
        select(ModerationAction)
        .where(
            ModerationAction.target_id == user_id,
            ModerationAction.target_type == "user",
            ModerationAction.action.in_([a.value for a in BAN_ACTIONS]),
        )
        .order_by(ModerationAction.created_at.desc())
    )
    for ban in result.scalars():
        if is_ban_active(ban.action, ban.expires_at, now):
            return ban
    return None


async def get_banned_user_ids(db: AsyncSession, user_ids: Iterable[str]) -> set:
    ids = list(user_ids)
    if not ids:
        return set()
    now = datetime.utcnow()
    result = await db.execute(
        select(ModerationAction.target_id, ModerationAction.action, ModerationAction.expires_at).where(
            ModerationAction.target_id.in_(ids),
            ModerationAction.target_type == "user",
            ModerationAction.action.in_([a.value for a in BAN_ACTIONS]),
        )
    )
    return {target_id for target_id, action, expires_at in result.all() if is_ban_active(action, expires_at, now)}


async def create_strike(
    db: AsyncSession, user_id: str, action_id: str, reason: str, expires_at: Optional[datetime]
) -> UserStrike:
    strike = UserStrike(
        user_id=user_id, action_id=action_id, reason=reason, expires_at=expires_at, active=True
    )
    db.add(strike)
    await db.flush()
    return strike


def _active_strike_filter(now: datetime):
    return (
        UserStrike.active.is_(True),
        or_(UserStrike.expires_at.is_(None), UserStrike.expires_at > now),
    )


async def count_active_strikes(db: AsyncSession, user_id: str, now: Optional[datetime] = None) -> int:
    now = now or datetime.utcnow()
    return await db.scalar(
        select(func.count()).where(UserStrike.user_id == user_id, *_active_strike_filter(now))
    ) or 0


async def count_active_strikes_for(db: AsyncSession, user_ids: Iterable[str]) -> dict:
    ids = list(user_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(UserStrike.user_id, func.count())
        .where(UserStrike.user_id.in_(ids), *_active_strike_filter(datetime.utcnow()))
        .group_by(UserStrike.user_id)
    )
    return {uid: c for uid, c in result.all()}


async def expire_strikes(db: AsyncSession, now: datetime) -> int:
    result = await db.execute(
        update(UserStrike)
        .where(UserStrike.active.is_(True), UserStrike.expires_at.is_not(None), UserStrike.expires_at <= now)
        .values(active=False)
    )
    return result.rowcount or 0


async def count_flags(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(ContentFlag)) or 0
