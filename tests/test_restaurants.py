def test_create_requires_auth(client):
    r = client.post("/api/restaurants", json={"name": "Nope"})
    assert r.status_code in (400, 401)


def test_owner_creating_a_restaurant_owns_it(client, make_user, make_restaurant):
    owner = make_user(role="OWNER")
    diner = make_user()

    owned = make_restaurant(owner, name="Casa Owner")
    listed = make_restaurant(diner, name="Casa Diner")

    assert owned["ownerId"] == owner.id
    assert listed["ownerId"] is None
    assert owned["averageRating"] == 0.0
    assert owned["reviewCount"] == 0


def test_names_are_unique_ignoring_case(client, make_user, make_restaurant):
    user = make_user()
    make_restaurant(user, name="Blue Door")

    r = client.get("/api/restaurants/check-name", params={"name": "blue door"})
    assert r.json() == {"available": False}
    assert client.get("/api/restaurants/check-name", params={"name": "Green Door"}).json() == {"available": True}

    dup = client.post(
        "/api/restaurants",
        json={
            "name": "BLUE DOOR",
            "description": "Another place entirely.",
            "address": "9 Side Street",
            "latitude": 1.0,
            "longitude": 1.0,
        },
        headers=user.headers,
    )
    assert dup.status_code == 409


def test_list_filters_and_pagination(client, make_user, make_restaurant):
    user = make_user()
    make_restaurant(user, name="Sushi Go", categories=["japanese", "sushi"], priceRange=3)
    make_restaurant(user, name="Pasta Bar", categories=["italian"], priceRange=2)
    make_restaurant(user, name="Pizza Corner", categories=["italian", "pizza"], priceRange=1)

    everything = client.get("/api/restaurants").json()
    assert everything["pagination"]["total"] == 3
    # newest first by default
    assert everything["restaurants"][0]["name"] == "Pizza Corner"

    italian = client.get("/api/restaurants", params={"category": "italian"}).json()
    assert {r["name"] for r in italian["restaurants"]} == {"Pasta Bar", "Pizza Corner"}

    cheap = client.get("/api/restaurants", params={"priceRange": 1}).json()
    assert [r["name"] for r in cheap["restaurants"]] == ["Pizza Corner"]

    search = client.get("/api/restaurants", params={"search": "sushi"}).json()
    assert [r["name"] for r in search["restaurants"]] == ["Sushi Go"]

    paged = client.get("/api/restaurants", params={"limit": 2, "page": 2}).json()
    assert len(paged["restaurants"]) == 1
    assert paged["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}


def test_ratings_are_aggregated(client, make_user, make_restaurant, make_review):
    creator = make_user()
    good = make_restaurant(creator, name="Good Place")
    plain = make_restaurant(creator, name="Plain Place")

    make_review(make_user(), good["id"], rating=5)
    make_review(make_user(), good["id"], rating=3)
    make_review(make_user(), plain["id"], rating=2)

    detail = client.get(f"/api/restaurants/{good['id']}").json()["restaurant"]
    assert detail["averageRating"] == 4.0
    assert detail["reviewCount"] == 2

    ranked = client.get("/api/restaurants", params={"sortBy": "rating"}).json()["restaurants"]
    assert [r["name"] for r in ranked] == ["Good Place", "Plain Place"]

    rated = client.get("/api/restaurants", params={"minRating": 3}).json()["restaurants"]
    assert [r["name"] for r in rated] == ["Good Place"]


def test_get_missing_restaurant(client):
    r = client.get("/api/restaurants/does-not-exist")
    assert r.status_code == 404
    assert r.json()["detail"] == "Restaurant not found"


def test_update_is_owner_or_admin_only(client, make_user, make_restaurant):
    owner = make_user(role="OWNER")
    stranger = make_user()
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(owner, name="Corner Cafe")

    r = client.put(f"/api/restaurants/{restaurant['id']}", json={"priceRange": 4}, headers=stranger.headers)
    assert r.status_code == 403

    r = client.put(f"/api/restaurants/{restaurant['id']}", json={"priceRange": 4}, headers=owner.headers)
    assert r.status_code == 200
    assert r.json()["restaurant"]["priceRange"] == 4
    assert r.json()["restaurant"]["owner"]["id"] == owner.id

    r = client.put(f"/api/restaurants/{restaurant['id']}", json={"phone": "555-0100"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["restaurant"]["phone"] == "555-0100"


def test_delete_is_admin_only(client, make_user, make_restaurant, make_review):
    owner = make_user(role="OWNER")
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(owner)
    review = make_review(make_user(), restaurant["id"])

    assert client.delete(f"/api/restaurants/{restaurant['id']}", headers=owner.headers).status_code == 403
    assert client.delete(f"/api/restaurants/{restaurant['id']}", headers=admin.headers).status_code == 204
    assert client.get(f"/api/restaurants/{restaurant['id']}").status_code == 404
    assert client.get(f"/api/reviews/{review['id']}").status_code == 404


def test_nearby_search(client, make_user, make_restaurant):
    user = make_user()
    make_restaurant(user, name="Downtown", latitude=40.7128, longitude=-74.0060)
    make_restaurant(user, name="Midtown", latitude=40.7549, longitude=-73.9840)
    make_restaurant(user, name="Los Angeles", latitude=34.0522, longitude=-118.2437)

    r = client.get("/api/restaurants/nearby", params={"lat": 40.7128, "lng": -74.0060, "radius": 10})
    assert r.status_code == 200
    body = r.json()
    assert [x["name"] for x in body["restaurants"]] == ["Downtown", "Midtown"]
    assert body["restaurants"][0]["distance"] == 0.0
    assert 4 < body["restaurants"][1]["distance"] < 6
    assert body["center"] == {"lat": 40.7128, "lng": -74.006}
    assert body["radius"] == 10

    tight = client.get("/api/restaurants/nearby", params={"lat": 40.7128, "lng": -74.0060, "radius": 1}).json()
    assert [x["name"] for x in tight["restaurants"]] == ["Downtown"]


def test_nearby_validates_coordinates(client):
    assert client.get("/api/restaurants/nearby", params={"lat": 120, "lng": 0}).status_code == 400


def test_trending_uses_recent_reviews(client, make_user, make_restaurant, make_review):
    creator = make_user()
    busy = make_restaurant(creator, name="Busy Bistro")
    quiet = make_restaurant(creator, name="Quiet Diner")
    make_restaurant(creator, name="Empty Room")

    make_review(make_user(), busy["id"], rating=5)
    make_review(make_user(), busy["id"], rating=4)
    make_review(make_user(), quiet["id"], rating=3)

    r = client.get("/api/restaurants/trending")
    assert r.status_code == 200
    trending = r.json()["restaurants"]
    assert [x["name"] for x in trending] == ["Busy Bistro", "Quiet Diner"]
    assert trending[0]["recentReviews"] == 2
    assert trending[0]["previousReviews"] == 0
    assert trending[0]["trend"] == "up"
    assert trending[0]["score"] > trending[1]["score"]


def _hide(client, make_user, review_id):
    report = client.post(
        "/api/reports",
        json={"type": "REVIEW", "targetId": review_id, "reason": "Harassment", "description": "Abusive"},
        headers=make_user().headers,
    ).json()["report"]
    r = client.post(
        "/api/admin/reports/resolve",
        json={"reportId": report["id"], "action": "approve"},
        headers=make_user(role="MODERATOR").headers,
    )
    assert r.status_code == 200


def test_hidden_reviews_are_listed_for_owner_and_staff_only(client, make_user, make_restaurant, make_review):
    owner = make_user(role="OWNER")
    restaurant = make_restaurant(owner, name="Guarded Grill")
    kept = make_review(make_user(), restaurant["id"], rating=5)
    hidden = make_review(make_user(), restaurant["id"], rating=1)
    _hide(client, make_user, hidden["id"])
    url = f"/api/restaurants/{restaurant['id']}/reviews"

    public = client.get(url).json()
    assert [r["id"] for r in public["reviews"]] == [kept["id"]]
    assert public["pagination"]["total"] == 1

    stranger = client.get(url, headers=make_user().headers).json()
    assert [r["id"] for r in stranger["reviews"]] == [kept["id"]]

    for viewer in (owner, make_user(role="ADMIN")):
        listed = client.get(url, headers=viewer.headers).json()["reviews"]
        assert {r["id"] for r in listed} == {kept["id"], hidden["id"]}

    # the single-review view follows the same rule
    assert client.get(f"/api/reviews/{hidden['id']}").status_code == 404
    assert client.get(f"/api/reviews/{hidden['id']}", headers=make_user().headers).status_code == 404
    shown = client.get(f"/api/reviews/{hidden['id']}", headers=owner.headers)
    assert shown.status_code == 200
    assert shown.json()["review"]["isHidden"] is True
