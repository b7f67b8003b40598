from datetime import datetime, timedelta

import pytest

from taste_trail.domains.moderation.entities import (
    ModerationActionType,
    action_for_reason,
    is_ban_active,
    severity_for_reason,
)


@pytest.fixture
def reviewed(client, make_user, make_restaurant, make_review):
    author = make_user(name="Author")
    restaurant = make_restaurant(make_user())
    review = make_review(author, restaurant["id"])
    return author, review


def _report(client, user, target_id, type_="REVIEW", reason="Harassment"):
    return client.post(
        "/api/reports",
        json={"type": type_, "targetId": target_id, "reason": reason, "description": "Rude"},
        headers=user.headers,
    )


def test_submit_report(client, make_user, reviewed):
    _, review = reviewed
    reporter = make_user()
    moderator = make_user(role="MODERATOR")

    r = _report(client, reporter, review["id"])
    assert r.status_code == 201
    report = r.json()["report"]
    assert report["status"] == "PENDING"
    assert report["type"] == "REVIEW"

    assert _report(client, reporter, review["id"]).status_code == 409

    mine = client.get("/api/reports", headers=reporter.headers).json()
    assert [x["id"] for x in mine["reports"]] == [report["id"]]

    staff_notes = client.get("/api/notifications", headers=moderator.headers).json()["notifications"]
    assert [n["type"] for n in staff_notes if n["type"] == "report_submitted"] == ["report_submitted"]
    reporter_notes = client.get("/api/notifications", headers=reporter.headers).json()["notifications"]
    assert all(n["type"] != "report_submitted" for n in reporter_notes)


def test_report_validation(client, make_user):
    reporter = make_user()
    assert _report(client, reporter, "missing").status_code == 404
    assert _report(client, reporter, reporter.id, type_="USER").status_code == 400
    assert _report(client, reporter, "x", type_="SHOP").status_code == 400


def test_reported_reviews_leave_the_public_list(client, make_user, reviewed):
    _, review = reviewed
    before = client.get("/api/reviews").json()
    assert before["pagination"]["total"] == 1

    _report(client, make_user(), review["id"], reason="Spam")
    after = client.get("/api/reviews").json()
    assert after["pagination"]["total"] == 0


def test_report_queue_is_staff_only(client, make_user, reviewed):
    _, review = reviewed
    reporter = make_user()
    _report(client, reporter, review["id"])

    assert client.get("/api/admin/reports", headers=reporter.headers).status_code == 403

    moderator = make_user(role="MODERATOR")
    queue = client.get("/api/admin/reports", params={"status": "PENDING"}, headers=moderator.headers).json()
    assert queue["pagination"]["total"] == 1
    assert queue["reports"][0]["reporter"]["id"] == reporter.id

    flags = client.get("/api/admin/moderation", params={"type": "flags"}, headers=moderator.headers).json()
    assert flags["items"][0]["contentId"] == review["id"]
    assert flags["items"][0]["severity"] == 4


def test_status_moves_between_pending_and_investigating(client, make_user, reviewed):
    _, review = reviewed
    moderator = make_user(role="MODERATOR")
    report = _report(client, make_user(), review["id"]).json()["report"]
    url = f"/api/admin/reports/{report['id']}/status"

    r = client.patch(url, json={"status": "INVESTIGATING"}, headers=moderator.headers)
    assert r.status_code == 200
    assert r.json()["report"]["status"] == "INVESTIGATING"

    assert client.patch(url, json={"status": "RESOLVED"}, headers=moderator.headers).status_code == 409
    assert client.patch(url, json={"status": "PENDING"}, headers=moderator.headers).status_code == 200


def test_approving_a_report_hides_the_review(client, make_user, reviewed):
    author, review = reviewed
    reporter = make_user()
    moderator = make_user(role="MODERATOR")
    report = _report(client, reporter, review["id"]).json()["report"]

    r = client.post(
        "/api/admin/reports/resolve",
        json={"reportId": report["id"], "action": "approve", "notes": "Removed"},
        headers=moderator.headers,
    )
    assert r.status_code == 200
    assert r.json()["report"]["status"] == "RESOLVED"
    assert r.json()["report"]["resolvedBy"] == moderator.id

    assert client.get(f"/api/reviews/{review['id']}", headers=reporter.headers).status_code == 404
    own = client.get(f"/api/reviews/{review['id']}", headers=author.headers).json()["review"]
    assert own["isHidden"] is True

    again = client.post(
        "/api/admin/reports/resolve",
        json={"reportId": report["id"], "action": "reject"},
        headers=moderator.headers,
    )
    assert again.status_code == 409

    notes = client.get("/api/notifications", headers=reporter.headers).json()["notifications"]
    assert any(n["type"] == "report_resolved" for n in notes)

    dashboard = client.get("/api/admin/dashboard", headers=moderator.headers).json()
    assert dashboard["activeFlags"] == 0
    assert dashboard["pendingReports"] == 0


def test_rejecting_a_report_keeps_content(client, make_user, reviewed):
    _, review = reviewed
    moderator = make_user(role="MODERATOR")
    report = _report(client, make_user(), review["id"]).json()["report"]

    r = client.post(
        "/api/admin/reports/resolve",
        json={"reportId": report["id"], "action": "reject"},
        headers=moderator.headers,
    )
    assert r.json()["report"]["status"] == "REJECTED"
    assert client.get(f"/api/reviews/{review['id']}").status_code == 200


def test_approved_user_report_adds_a_strike(client, make_user):
    target = make_user()
    admin = make_user(role="ADMIN")
    report = _report(client, make_user(), target.id, type_="USER", reason="Spam").json()["report"]

    client.post(
        "/api/admin/reports/resolve",
        json={"reportId": report["id"], "action": "approve"},
        headers=admin.headers,
    )
    status = client.get(f"/api/admin/users/{target.id}/moderation", headers=admin.headers).json()
    assert status["activeStrikes"] == 1
    assert status["banned"] is False

    users = client.get("/api/admin/users", params={"search": target.email}, headers=admin.headers).json()
    assert users["users"][0]["strikeCount"] == 1


def test_moderator_limits(client, make_user):
    moderator = make_user(role="MODERATOR")
    admin = make_user(role="ADMIN")
    user = make_user()

    def act(actor, target_id, action):
        return client.post(
            "/api/admin/moderation",
            json={"userId": target_id, "action": action, "reason": "Policy"},
            headers=actor.headers,
        )

    assert act(moderator, moderator.id, "warn").status_code == 400
    assert act(moderator, admin.id, "warn").status_code == 403
    assert act(moderator, user.id, "promote").status_code == 403
    assert act(user, moderator.id, "warn").status_code == 403

    assert act(admin, user.id, "promote").status_code == 201
    me = client.get("/api/auth/me", headers=user.headers).json()
    assert me["user"]["role"] == "MODERATOR"


def test_warning_notifies_the_user(client, make_user):
    moderator = make_user(role="MODERATOR")
    user = make_user()
    client.post(
        "/api/admin/moderation",
        json={"userId": user.id, "action": "warn", "reason": "Be nice"},
        headers=moderator.headers,
    )
    notes = client.get("/api/notifications", headers=user.headers).json()["notifications"]
    warning = [n for n in notes if n["type"] == "moderation_warning"]
    assert len(warning) == 1
    assert "Be nice" in warning[0]["message"]


def test_reason_tables():
    assert severity_for_reason("Violence") == 5
    assert severity_for_reason("Something new") == 1
    assert action_for_reason("Hate Speech") == ModerationActionType.CONTENT_REMOVAL
    assert action_for_reason("Other") == ModerationActionType.WARNING


def test_ban_activity():
    now = datetime(2024, 1, 1, 12, 0)
    assert is_ban_active("PERMANENT_BAN", None, now)
    assert is_ban_active("TEMPORARY_BAN", now + timedelta(hours=1), now)
    assert not is_ban_active("TEMPORARY_BAN", now, now)
    assert not is_ban_active("WARNING", None, now)
