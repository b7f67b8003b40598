from datetime import datetime

from asgiref.sync import async_to_sync

from taste_trail.core.celery import celery_app
from taste_trail.core.config import settings
from taste_trail.core.database import session_scope
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.moderation import repository as moderation_repository
from taste_trail.domains.notifications.service import notification_service
from taste_trail.shared.utils.logger import get_logger

logger = get_logger(__name__)


async def purge_expired_sessions() -> int:
    async with session_scope() as db:
        removed = await auth_repository.delete_expired_sessions(db, datetime.utcnow())
    logger.info(f"Purged {removed} expired sessions")
    return removed


async def expire_strikes() -> int:
    async with session_scope() as db:
        expired = await moderation_repository.expire_strikes(db, datetime.utcnow())
    logger.info(f"Deactivated {expired} expired strikes")
    return expired


@celery_app.task
def cleanup_old_notifications_task(days: int = settings.NOTIFICATION_RETENTION_DAYS):
    return async_to_sync(notification_service.cleanup_old)(days)


@celery_app.task
def purge_expired_sessions_task():
    return async_to_sync(purge_expired_sessions)()


@celery_app.task
def expire_strikes_task():
    return async_to_sync(expire_strikes)()
