from taste_trail.core import celery, database, redis


async def _up():
    return True


async def _down():
    return False


def test_health_shape(client, monkeypatch):
    monkeypatch.setattr(database, "check_connection", _up)
    monkeypatch.setattr(redis, "check_connection", _up)
    monkeypatch.setattr(celery, "check_connection", _up)
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["services"] == {"database": True, "redis": True, "rabbitmq": True}
    assert body["environment"] == "test"
    assert body["activeConnections"] == 0
    assert "version" in body


def test_health_broker_down(client, monkeypatch):
    monkeypatch.setattr(database, "check_connection", _up)
    monkeypatch.setattr(redis, "check_connection", _up)
    monkeypatch.setattr(celery, "check_connection", _down)
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "degraded"
    assert body["services"]["rabbitmq"] is False
