import pytest
from starlette.websockets import WebSocketDisconnect

from taste_trail.domains.notifications.templates import TEMPLATES, render


def test_welcome_notification(client, make_user):
    user = make_user(name="Robin")
    body = client.get("/api/notifications", headers=user.headers).json()
    assert body["unreadCount"] == 1
    assert body["pagination"]["total"] == 1
    welcome = body["notifications"][0]
    assert welcome["type"] == "welcome"
    assert welcome["title"] == "Welcome to Taste Trail!"
    assert "Robin" in welcome["message"]
    assert welcome["read"] is False


def test_mark_read_and_stats(client, make_user):
    user = make_user()
    fans = [make_user() for _ in range(2)]
    for fan in fans:
        client.post(f"/api/users/{user.id}/follow", headers=fan.headers)

    items = client.get("/api/notifications", headers=user.headers).json()["notifications"]
    follow_ids = [n["id"] for n in items if n["type"] == "follow"]
    assert len(follow_ids) == 2

    r = client.put("/api/notifications/read", json={"ids": follow_ids[:1]}, headers=user.headers)
    assert r.json() == {"updated": 1}

    unread = client.get("/api/notifications", params={"unread": True}, headers=user.headers).json()
    assert unread["unreadCount"] == 2

    stats = client.get("/api/notifications/stats", headers=user.headers).json()
    assert stats == {"total": 3, "unread": 2, "byType": {"welcome": 1, "follow": 2}}

    assert client.put("/api/notifications/read", json={}, headers=user.headers).json() == {"updated": 2}
    assert client.get("/api/notifications", headers=user.headers).json()["unreadCount"] == 0


def test_preferences(client, make_user):
    user = make_user()
    prefs = client.get("/api/notifications/preferences", headers=user.headers).json()
    assert prefs == {"pushEnabled": True, "emailEnabled": True}

    r = client.put("/api/notifications/preferences", json={"pushEnabled": False}, headers=user.headers)
    assert r.json() == {"pushEnabled": False, "emailEnabled": True}


def test_announcement_reaches_every_user(client, make_user):
    admin = make_user(role="ADMIN")
    users = [make_user() for _ in range(3)]

    assert client.post(
        "/api/admin/notifications", json={"title": "Hi", "message": "Hello"}, headers=users[0].headers
    ).status_code == 403

    r = client.post(
        "/api/admin/notifications",
        json={"title": "New feature", "message": "Try the nearby search"},
        headers=admin.headers,
    )
    assert r.json() == {"sent": 4}

    latest = client.get("/api/notifications", headers=users[1].headers).json()["notifications"][0]
    assert latest["type"] == "system_announcement"
    assert latest["title"] == "New feature"
    assert latest["message"] == "Try the nearby search"

    stats = client.get("/api/admin/notifications", headers=admin.headers).json()
    assert stats["byType"]["system_announcement"] == 4
    assert stats["recentAnnouncements"][0]["title"] == "New feature"


def test_announcement_by_role(client, make_user):
    admin = make_user(role="ADMIN")
    make_user(role="OWNER")
    make_user()
    r = client.post(
        "/api/admin/notifications",
        json={"title": "Owners", "message": "New dashboard", "roles": ["OWNER"]},
        headers=admin.headers,
    )
    assert r.json() == {"sent": 1}


def test_socket_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/notifications/ws"):
            pass
    assert exc.value.code == 4401


def test_socket_backlog_and_live_push(client, make_user):
    user = make_user()
    fan = make_user(name="Live Fan")

    with client.websocket_connect(f"/api/notifications/ws?token={user.token}") as ws:
        assert ws.receive_json()["type"] == "connected"
        backlog = ws.receive_json()
        assert backlog["type"] == "notification"
        assert backlog["notification"]["type"] == "welcome"
        assert ws.receive_json() == {"type": "unread_count", "unreadCount": 1}

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        client.post(f"/api/users/{user.id}/follow", headers=fan.headers)
        pushed = ws.receive_json()
        assert pushed["type"] == "notification"
        assert pushed["notification"]["type"] == "follow"
        assert pushed["notification"]["fromId"] == fan.id
        assert ws.receive_json() == {"type": "unread_count_update", "unreadCount": 2}

        health = client.get("/api/admin/notifications", headers=make_user(role="ADMIN").headers).json()
        assert health["activeConnections"] == 1


def test_templates_render_with_missing_fields():
    title, message = render("like", {"liker_name": "Sam"})
    assert title == "New like"
    assert message == "Sam liked your review of"


def test_unknown_template():
    with pytest.raises(ValueError):
        render("nope", {})


def test_every_template_renders():
    for name in TEMPLATES:
        title, message = render(name, {})
        assert isinstance(title, str) and isinstance(message, str)
