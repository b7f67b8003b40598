from taste_trail.domains.notifications.service import notification_service
from taste_trail.tasks import cleanup


def test_cleanup_task_no_event_loop_crash(monkeypatch):
    calls = []

    async def fake_cleanup(days):
        calls.append(days)
        return 3

    monkeypatch.setattr(notification_service, "cleanup_old", fake_cleanup)
    assert cleanup.cleanup_old_notifications_task(5) == 3
    assert calls == [5]


def test_strike_task_runs_helper(monkeypatch):
    async def fake_expire():
        return 2

    monkeypatch.setattr(cleanup, "expire_strikes", fake_expire)
    assert cleanup.expire_strikes_task() == 2


def test_session_purge_against_database(client, make_user):
    make_user()
    # the fresh refresh session is still valid
    assert cleanup.purge_expired_sessions_task() == 0
    assert cleanup.expire_strikes_task() == 0


def test_beat_schedule_points_at_tasks():
    from taste_trail.core.celery import celery_app

    tasks = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}
    assert tasks == {
        "taste_trail.tasks.cleanup.cleanup_old_notifications_task",
        "taste_trail.tasks.cleanup.purge_expired_sessions_task",
        "taste_trail.tasks.cleanup.expire_strikes_task",
    }


def test_enrichment_task_runs_enricher(monkeypatch):
    from taste_trail.domains.reviews.enrichment import review_enricher
    from taste_trail.tasks.enrichment import enrich_review_task

    seen = []

    async def fake_enrich(review_id, content, restaurant_name="Unknown"):
        seen.append((review_id, restaurant_name))
        return True

    monkeypatch.setattr(review_enricher, "enrich", fake_enrich)
    assert enrich_review_task("r1", "Great pasta, friendly staff and a cozy room.", "Nonna's") is True
    assert seen == [("r1", "Nonna's")]
