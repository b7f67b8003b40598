import asyncio
import itertools
import os
import tempfile
from dataclasses import dataclass

import pytest

_db_dir = tempfile.mkdtemp(prefix="taste_trail_tests_")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["CACHE_ENABLED"] = "false"
os.environ["PUSH_BACKEND"] = "local"
os.environ["AI_ENRICHMENT_ENABLED"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from taste_trail.core.database import drop_db, session_scope  # noqa: E402
from taste_trail.domains.auth.models import User  # noqa: E402
from taste_trail.main import app  # noqa: E402

PASSWORD = "password123"


@dataclass
class AuthedUser:
    id: str
    email: str
    name: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


def set_role(user_id: str, role: str):
    async def _update():
        async with session_scope() as db:
            user = await db.get(User, user_id)
            user.role = role

    asyncio.run(_update())


@pytest.fixture
def client():
    asyncio.run(drop_db())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    counter = itertools.count(1)

    def _make(role: str = "USER", name: str = None, email: str = None) -> AuthedUser:
        n = next(counter)
        email = email or f"user{n}@example.com"
        name = name or f"User {n}"
        signup_role = role if role in ("USER", "INFLUENCER", "OWNER") else "USER"
        r = client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "name": name, "role": signup_role},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        # requests in tests authenticate by header only
        client.cookies.clear()
        if role != signup_role:
            set_role(body["user"]["id"], role)
        return AuthedUser(id=body["user"]["id"], email=email, name=name, token=body["accessToken"])

    return _make


@pytest.fixture
def make_restaurant(client):
    counter = itertools.count(1)

    def _make(user: AuthedUser, **overrides) -> dict:
        n = next(counter)
        payload = {
            "name": f"Restaurant {n}",
            "description": "Seasonal plates and a long wine list.",
            "address": f"{n} Main Street",
            "latitude": 40.7128,
            "longitude": -74.0060,
            "priceRange": 2,
            "categories": ["italian"],
        }
        payload.update(overrides)
        r = client.post("/api/restaurants", json=payload, headers=user.headers)
        assert r.status_code == 201, r.text
        return r.json()["restaurant"]

    return _make


@pytest.fixture
def make_review(client):
    def _make(user: AuthedUser, restaurant_id: str, rating: int = 4, **overrides) -> dict:
        payload = {
            "restaurantId": restaurant_id,
            "rating": rating,
            "title": "Lovely evening",
            "content": "Great pasta, friendly staff and a cozy room.",
        }
        payload.update(overrides)
        r = client.post("/api/reviews", json=payload, headers=user.headers)
        assert r.status_code == 201, r.text
        return r.json()["review"]

    return _make
