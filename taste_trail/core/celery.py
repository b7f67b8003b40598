# taste_trail/core/celery.py
from celery import Celery
from celery.schedules import crontab

from taste_trail.core.config import settings

celery_app = Celery(
    "taste_trail_tasks",
    broker=settings.RABBITMQ_URL,
    backend=settings.REDIS_URL,
    include=["taste_trail.tasks.cleanup", "taste_trail.tasks.enrichment"],
)


def init_celery():
    celery_app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        worker_send_task_events=True,
        broker_connection_retry_on_startup=True,
        task_track_started=True,
    )


async def check_connection() -> bool:
    try:
        with celery_app.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1)
            return True
    except Exception:
        return False


celery_app.conf.beat_schedule = {
    "cleanup-old-notifications": {
        "task": "taste_trail.tasks.cleanup.cleanup_old_notifications_task",
        "schedule": crontab(hour=3, minute=0),
    },
    "purge-expired-sessions": {
        "task": "taste_trail.tasks.cleanup.purge_expired_sessions_task",
        "schedule": crontab(minute=15),
    },
    "expire-strikes": {
        "task": "taste_trail.tasks.cleanup.expire_strikes_task",
        "schedule": crontab(hour=3, minute=30),
    },
}
