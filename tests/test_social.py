def test_follow_and_unfollow(client, make_user):
    fan = make_user(name="Fan")
    chef = make_user(name="Chef")

    r = client.post(f"/api/users/{chef.id}/follow", headers=fan.headers)
    assert r.status_code == 200
    assert r.json() == {"isFollowing": True, "followersCount": 1, "followingCount": 0}

    assert client.post(f"/api/users/{chef.id}/follow", headers=fan.headers).status_code == 409
    assert client.get(f"/api/users/{chef.id}/follow", headers=fan.headers).json()["isFollowing"] is True

    followers = client.get(f"/api/users/{chef.id}/followers").json()
    assert [u["name"] for u in followers["users"]] == ["Fan"]
    following = client.get(f"/api/users/{fan.id}/following").json()
    assert [u["name"] for u in following["users"]] == ["Chef"]

    notes = client.get("/api/notifications", headers=chef.headers).json()["notifications"]
    follows = [n for n in notes if n["type"] == "follow"]
    assert len(follows) == 1
    assert follows[0]["message"] == "Fan started following you"

    r = client.delete(f"/api/users/{chef.id}/follow", headers=fan.headers)
    assert r.json()["isFollowing"] is False
    assert r.json()["followersCount"] == 0
    assert client.delete(f"/api/users/{chef.id}/follow", headers=fan.headers).status_code == 404


def test_cannot_follow_self_or_missing_user(client, make_user):
    user = make_user()
    assert client.post(f"/api/users/{user.id}/follow", headers=user.headers).status_code == 400
    assert client.post("/api/users/missing/follow", headers=user.headers).status_code == 404


def test_public_profile(client, make_user, make_restaurant, make_review):
    chef = make_user(name="Chef")
    fan = make_user()
    make_review(chef, make_restaurant(fan)["id"])
    client.post(f"/api/users/{chef.id}/follow", headers=fan.headers)

    anonymous = client.get(f"/api/users/{chef.id}").json()
    assert anonymous["user"]["name"] == "Chef"
    assert anonymous["reviewCount"] == 1
    assert anonymous["followersCount"] == 1
    assert anonymous["isFollowing"] is False

    as_fan = client.get(f"/api/users/{chef.id}", headers=fan.headers).json()
    assert as_fan["isFollowing"] is True

    assert client.get("/api/users/missing").status_code == 404


def test_update_profile(client, make_user):
    user = make_user()
    r = client.put(
        "/api/users/profile",
        json={"name": "New Name", "bio": "I eat everything", "dietaryPrefs": ["vegetarian"]},
        headers=user.headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["name"] == "New Name"
    assert body["profile"]["bio"] == "I eat everything"
    assert body["profile"]["dietaryPrefs"] == ["vegetarian"]

    me = client.get("/api/auth/me", headers=user.headers).json()
    assert me["user"]["name"] == "New Name"
