# taste_trail/domains/notifications/service.py
"""
Notification fan-out.

The database row is the source of truth. Live push is best-effort and
happens only after the row is committed, through the push broker so that
every worker holding a socket for the user gets the message.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.config import settings
from taste_trail.core.database import session_scope
from taste_trail.core.pubsub import PushBroker, push_broker
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.shared.utils.logger import get_logger
from . import repository
from .models import Notification
from .schemas import NotificationOut
from .templates import render

logger = get_logger(__name__)


class NotificationService:
    def __init__(self, broker: PushBroker):
        self.broker = broker

    def stage(
        self,
        db: AsyncSession,
        notification_type: str,
        user_id: str,
        *,
        from_id: Optional[str] = None,
        review_id: Optional[str] = None,
        comment_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Notification:
        """Add a notification to the caller's transaction. Delivery is the caller's job after commit."""
        title, message = render(notification_type, data or {})
        notification = Notification(
            user_id=user_id,
            from_id=from_id,
            type=notification_type,
            title=title,
            message=message,
            review_id=review_id,
            comment_id=comment_id,
            data=data or {},
            read=False,
        )
        db.add(notification)
        return notification

    async def deliver(self, notifications: Iterable[Notification]):
        """Push committed notifications to live sockets, then refresh unread counters."""
        pending = [n for n in notifications if n is not None]
        if not pending:
            return
        try:
            async with session_scope() as db:
                muted = await repository.push_disabled_users(db, (n.user_id for n in pending))
                recipients = {n.user_id for n in pending} - muted
                counts = {uid: await repository.count_unread(db, uid) for uid in recipients}
            for notification in pending:
                if notification.user_id not in recipients:
                    continue
                payload = jsonable_encoder(NotificationOut.model_validate(notification))
                await self.broker.publish(notification.user_id, {"type": "notification", "notification": payload})
            for user_id, unread in counts.items():
                await self.broker.publish(user_id, {"type": "unread_count_update", "unreadCount": unread})
        except Exception as e:
            logger.warning(f"Live delivery failed: {e}")

    async def notify(
        self,
        notification_type: str,
        user_id: str,
        *,
        from_id: Optional[str] = None,
        review_id: Optional[str] = None,
        comment_id: Optional[str] = None,
        data: Optional[dict] = None,
        skip_if_exists: bool = False,
    ) -> Optional[Notification]:
        """Persist and push one notification in its own transaction. Never raises."""
        try:
            async with session_scope() as db:
                if skip_if_exists:
                    since = datetime.utcnow() - timedelta(hours=settings.NOTIFICATION_DEDUP_HOURS)
                    if await repository.recent_duplicate_exists(
                        db, notification_type, user_id, from_id, review_id, comment_id, since
                    ):
                        logger.debug(f"Skipping duplicate {notification_type} for {user_id}")
                        return None
                notification = self.stage(
                    db,
                    notification_type,
                    user_id,
                    from_id=from_id,
                    review_id=review_id,
                    comment_id=comment_id,
                    data=data,
                )
        except Exception as e:
            logger.error(f"Failed to create {notification_type} notification for {user_id}: {e}")
            return None

        await self.deliver([notification])
        return notification

    async def notify_many(
        self,
        user_ids: Iterable[str],
        notification_type: str,
        *,
        exclude: Optional[str] = None,
        **kwargs,
    ) -> int:
        sent = 0
        for user_id in dict.fromkeys(user_ids):
            if user_id == exclude:
                continue
            if await self.notify(notification_type, user_id, **kwargs):
                sent += 1
        return sent

    async def notify_roles(self, roles: Iterable[str], notification_type: str, **kwargs) -> int:
        try:
            async with session_scope() as db:
                user_ids = await auth_repository.get_user_ids_by_roles(db, roles)
        except Exception as e:
            logger.error(f"Could not resolve recipients for {notification_type}: {e}")
            return 0
        return await self.notify_many(user_ids, notification_type, **kwargs)

    async def send_welcome(self, user_id: str, name: str) -> Optional[Notification]:
        try:
            async with session_scope() as db:
                since = datetime.utcnow() - timedelta(days=settings.WELCOME_REPEAT_DAYS)
                if await repository.recent_duplicate_exists(db, "welcome", user_id, None, None, None, since):
                    return None
        except Exception as e:
            logger.warning(f"Welcome check failed for {user_id}: {e}")
            return None
        return await self.notify("welcome", user_id, data={"name": name})

    async def announce(
        self,
        title: str,
        message: str,
        *,
        sender_id: Optional[str] = None,
        roles: Optional[List[str]] = None,
        verified: Optional[bool] = None,
    ) -> int:
        """System announcement to every matching user, committed and pushed batch by batch."""
        async with session_scope() as db:
            user_ids = await auth_repository.get_user_ids(db, roles=roles, verified=verified)

        data = {"title": title, "message": message}
        batch_size = settings.ANNOUNCEMENT_BATCH_SIZE
        sent = 0
        for start in range(0, len(user_ids), batch_size):
            batch = user_ids[start:start + batch_size]
            async with session_scope() as db:
                staged = [
                    self.stage(db, "system_announcement", uid, from_id=sender_id, data=data)
                    for uid in batch
                ]
            await self.deliver(staged)
            sent += len(staged)
        logger.info(f"Announcement '{title}' sent to {sent} users")
        return sent

    async def mark_read(self, db: AsyncSession, user_id: str, ids: Optional[List[str]]) -> int:
        updated = await repository.mark_read(db, user_id, ids)
        await db.commit()
        unread = await repository.count_unread(db, user_id)
        await self.broker.publish(user_id, {"type": "unread_count_update", "unreadCount": unread})
        return updated

    async def cleanup_old(self, days: int) -> int:
        async with session_scope() as db:
            removed = await repository.delete_read_before(db, datetime.utcnow() - timedelta(days=days))
        logger.info(f"Removed {removed} read notifications older than {days} days")
        return removed


notification_service = NotificationService(push_broker)
