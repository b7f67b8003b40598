import pytest

RESPONSE = "Thank you for visiting, we hope to see you again soon!"


@pytest.fixture
def owned_review(make_user, make_restaurant, make_review):
    owner = make_user(role="OWNER", name="Owner")
    restaurant = make_restaurant(owner, name="Owned Place")
    reviewer = make_user(name="Guest")
    review = make_review(reviewer, restaurant["id"], rating=5)
    return owner, restaurant, reviewer, review


def test_owner_lists_own_restaurants(client, make_user, make_restaurant, owned_review):
    owner, restaurant, _, _ = owned_review
    make_restaurant(make_user(), name="Someone Else's")
    admin = make_user(role="ADMIN")

    mine = client.get("/api/owner/restaurants", headers=owner.headers).json()["restaurants"]
    assert [r["id"] for r in mine] == [restaurant["id"]]
    assert mine[0]["reviewCount"] == 1

    everything = client.get("/api/owner/restaurants", headers=admin.headers).json()["restaurants"]
    assert len(everything) == 2

    assert client.get("/api/owner/restaurants", headers=make_user().headers).status_code == 403


def test_stats(client, make_user, make_review, owned_review):
    owner, restaurant, _, review = owned_review
    make_review(make_user(), restaurant["id"], rating=3)
    client.post(f"/api/reviews/{review['id']}/like", headers=make_user().headers)
    client.post(f"/api/owner/reviews/{review['id']}/respond", json={"content": RESPONSE}, headers=owner.headers)

    stats = client.get(f"/api/owner/restaurants/{restaurant['id']}/stats", headers=owner.headers).json()
    assert stats["totalReviews"] == 2
    assert stats["averageRating"] == 4.0
    assert stats["ratingDistribution"] == {"1": 0, "2": 0, "3": 1, "4": 0, "5": 1}
    assert stats["reviewsLast30Days"] == 2
    assert stats["responseRate"] == 50.0
    assert stats["totalLikes"] == 1
    assert len(stats["recentReviews"]) == 2

    other_owner = make_user(role="OWNER")
    r = client.get(f"/api/owner/restaurants/{restaurant['id']}/stats", headers=other_owner.headers)
    assert r.status_code == 403


def test_respond_to_review(client, make_user, owned_review):
    owner, _, reviewer, review = owned_review
    url = f"/api/owner/reviews/{review['id']}/respond"

    r = client.post(url, json={"content": RESPONSE}, headers=owner.headers)
    assert r.status_code == 200
    assert r.json()["response"]["content"] == RESPONSE

    # editing keeps a single response and does not notify again
    client.post(url, json={"content": RESPONSE + " Cheers."}, headers=owner.headers)
    assert client.get(url, headers=owner.headers).json()["response"]["content"].endswith("Cheers.")

    shown = client.get(f"/api/reviews/{review['id']}").json()["review"]
    assert shown["ownerResponse"]["ownerId"] == owner.id

    notes = client.get("/api/notifications", headers=reviewer.headers).json()["notifications"]
    assert len([n for n in notes if n["type"] == "owner_response"]) == 1

    other_owner = make_user(role="OWNER")
    assert client.post(url, json={"content": RESPONSE}, headers=other_owner.headers).status_code == 403
    assert client.post(url, json={"content": "short"}, headers=owner.headers).status_code == 400

    deleted = client.delete(url, headers=owner.headers)
    assert deleted.json() == {"message": "Response deleted successfully"}
    assert client.get(url, headers=owner.headers).status_code == 404
    assert client.delete(url, headers=owner.headers).status_code == 404


def test_influencer_who_wins_a_claim_manages_the_restaurant(client, make_user, make_restaurant, make_review):
    influencer = make_user(role="INFLUENCER")
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(make_user(), name="Influencer Eats")
    review = make_review(make_user(), restaurant["id"], rating=4)

    claim = client.post(
        f"/api/restaurants/{restaurant['id']}/claim",
        json={
            "phoneNumber": "+1 555 010 0000",
            "email": "creator@example.com",
            "position": "Co-owner",
            "message": "I co-own this restaurant and can share the partnership agreement on request.",
        },
        headers=influencer.headers,
    ).json()["claim"]
    client.put(f"/api/admin/restaurant-claims/{claim['id']}", json={"status": "APPROVED"}, headers=admin.headers)

    me = client.get("/api/auth/me", headers=influencer.headers).json()
    assert me["user"]["role"] == "INFLUENCER"

    mine = client.get("/api/owner/restaurants", headers=influencer.headers)
    assert mine.status_code == 200
    assert [r["id"] for r in mine.json()["restaurants"]] == [restaurant["id"]]

    stats = client.get(f"/api/owner/restaurants/{restaurant['id']}/stats", headers=influencer.headers)
    assert stats.status_code == 200
    assert stats.json()["totalReviews"] == 1

    url = f"/api/owner/reviews/{review['id']}/respond"
    r = client.post(url, json={"content": RESPONSE}, headers=influencer.headers)
    assert r.status_code == 200
    assert r.json()["response"]["ownerId"] == influencer.id
    assert client.get(url, headers=influencer.headers).status_code == 200


def test_response_is_private_to_the_owner_and_admins(client, make_user, owned_review):
    owner, _, _, review = owned_review
    url = f"/api/owner/reviews/{review['id']}/respond"
    client.post(url, json={"content": RESPONSE}, headers=owner.headers)

    assert client.get(url, headers=make_user(role="OWNER").headers).status_code == 403
    assert client.get(url, headers=make_user(role="ADMIN").headers).status_code == 200
    assert client.post(url, json={"content": RESPONSE}, headers=make_user(role="ADMIN").headers).status_code == 403
