import asyncio
from datetime import datetime, timedelta

from sqlalchemy import update

from conftest import PASSWORD
from taste_trail.core.database import session_scope
from taste_trail.domains.moderation.models import ModerationAction


def _register(client, email="ana@example.com", **extra):
    payload = {"email": email, "password": PASSWORD, "name": "Ana Lopez", **extra}
    return client.post("/api/auth/register", json=payload)


def test_register_sets_cookies_and_returns_token(client):
    r = _register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["role"] == "USER"
    assert body["user"]["verified"] is False
    assert body["accessToken"]
    assert "refreshToken" in r.cookies
    assert "accessToken" in r.cookies


def test_register_normalizes_email_and_rejects_duplicates(client):
    assert _register(client, email="Ana@Example.com").status_code == 201
    r = _register(client, email="ana@example.com")
    assert r.status_code == 409


def test_register_rejects_privileged_roles(client):
    r = _register(client, role="ADMIN")
    assert r.status_code == 400


def test_register_validates_password(client):
    r = client.post("/api/auth/register", json={"email": "a@example.com", "password": "short", "name": "Ana"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Validation failed"


def test_login_and_me(client):
    _register(client, role="OWNER")
    client.cookies.clear()

    bad = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "wrong-password"})
    assert bad.status_code == 401

    r = client.post("/api/auth/login", json={"email": "ana@example.com", "password": PASSWORD})
    assert r.status_code == 200
    token = r.json()["accessToken"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["user"]["role"] == "OWNER"
    assert body["profile"]["followerCount"] == 0
    assert body["followersCount"] == 0
    assert body["followingCount"] == 0


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_refresh_and_logout(client):
    _register(client)
    r = client.post("/api/auth/refresh")
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "ana@example.com"
    assert r.json()["accessToken"]

    assert client.post("/api/auth/logout").json() == {"success": True}
    assert client.post("/api/auth/refresh").status_code == 401


def test_refresh_without_cookie(client):
    r = client.post("/api/auth/refresh")
    assert r.status_code == 401


def test_banned_user_cannot_log_in(client, make_user):
    moderator = make_user(role="MODERATOR")
    target = make_user(email="target@example.com")

    r = client.post(
        "/api/admin/moderation",
        json={"userId": target.id, "action": "ban", "reason": "Repeated spam"},
        headers=moderator.headers,
    )
    assert r.status_code == 201
    assert r.json()["action"]["action"] == "PERMANENT_BAN"

    login = client.post("/api/auth/login", json={"email": target.email, "password": PASSWORD})
    assert login.status_code == 403
    ban = login.json()["ban"]
    assert ban["type"] == "PERMANENT_BAN"
    assert ban["reason"] == "Repeated spam"
    assert ban["expiresAt"] is None

    check = client.post("/api/auth/check-ban", json={"email": target.email})
    assert check.json()["banned"] is True
    assert check.json()["ban"]["type"] == "PERMANENT_BAN"


def test_temporary_ban_needs_duration(client, make_user):
    moderator = make_user(role="MODERATOR")
    target = make_user()

    r = client.post(
        "/api/admin/moderation",
        json={"userId": target.id, "action": "tempban", "reason": "Cool down"},
        headers=moderator.headers,
    )
    assert r.status_code == 400

    r = client.post(
        "/api/admin/moderation",
        json={"userId": target.id, "action": "tempban", "reason": "Cool down", "duration": 3},
        headers=moderator.headers,
    )
    assert r.status_code == 201
    assert r.json()["action"]["expiresAt"] is not None

    check = client.post("/api/auth/check-ban", json={"email": target.email})
    assert check.json()["banned"] is True
    assert check.json()["ban"]["type"] == "TEMPORARY_BAN"


def test_check_ban_for_unknown_email(client):
    r = client.post("/api/auth/check-ban", json={"email": "nobody@example.com"})
    assert r.status_code == 200
    assert r.json() == {"banned": False, "ban": None}


def _expire_bans(user_id: str):
    async def _update():
        async with session_scope() as db:
            await db.execute(
                update(ModerationAction)
                .where(ModerationAction.target_id == user_id)
                .values(expires_at=datetime.utcnow() - timedelta(minutes=1))
            )

    asyncio.run(_update())


def test_login_works_again_after_a_temporary_ban_expires(client, make_user):
    moderator = make_user(role="MODERATOR")
    target = make_user()
    credentials = {"email": target.email, "password": PASSWORD}

    client.post(
        "/api/admin/moderation",
        json={"userId": target.id, "action": "tempban", "reason": "Cool down", "duration": 1},
        headers=moderator.headers,
    )
    assert client.post("/api/auth/login", json=credentials).status_code == 403

    _expire_bans(target.id)

    r = client.post("/api/auth/login", json=credentials)
    assert r.status_code == 200
    assert r.json()["user"]["id"] == target.id
    assert client.post("/api/auth/check-ban", json={"email": target.email}).json()["banned"] is False
