import pytest

from taste_trail.core.exceptions import Conflict, ValidationFailed
from taste_trail.domains.applications.transitions import (
    ApplicationStatus,
    claim_transition,
    influencer_transition,
    promoted_role,
)
from taste_trail.domains.auth.entities import UserRole

REASON = "I have been reviewing restaurants in this city for five years and post weekly."
CLAIM_MESSAGE = "I am the general manager of this restaurant and can provide the business license on request."


def _apply(client, user, **overrides):
    payload = {
        "instagramHandle": "@foodie",
        "followerCount": 12000,
        "contentType": "Food photography",
        "reason": REASON,
    }
    payload.update(overrides)
    return client.post("/api/influencer/apply", json=payload, headers=user.headers)


def _claim(client, user, restaurant_id):
    return client.post(
        f"/api/restaurants/{restaurant_id}/claim",
        json={
            "phoneNumber": "+1 555 010 0000",
            "email": "manager@example.com",
            "position": "General Manager",
            "message": CLAIM_MESSAGE,
        },
        headers=user.headers,
    )


def test_influencer_application_flow(client, make_user):
    applicant = make_user()
    admin = make_user(role="ADMIN")

    r = _apply(client, applicant)
    assert r.status_code == 201
    application = r.json()["application"]
    assert application["status"] == "PENDING"
    assert _apply(client, applicant).status_code == 409

    admin_notes = client.get("/api/notifications", headers=admin.headers).json()["notifications"]
    assert any(n["type"] == "influencer_application_received" for n in admin_notes)

    pending = client.get(
        "/api/admin/influencer-applications", params={"status": "PENDING"}, headers=admin.headers
    ).json()
    assert [a["id"] for a in pending["applications"]] == [application["id"]]
    assert pending["applications"][0]["user"]["id"] == applicant.id

    r = client.put(
        f"/api/admin/influencer-applications/{application['id']}",
        json={"status": "APPROVED", "notes": "Welcome aboard"},
        headers=admin.headers,
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Application approved"
    assert r.json()["application"]["reviewedBy"] == admin.id

    me = client.get("/api/auth/me", headers=applicant.headers).json()
    assert me["user"]["role"] == "INFLUENCER"
    assert me["user"]["verified"] is True
    assert me["profile"]["socialLinks"] == {"instagram": "@foodie"}
    assert me["profile"]["followerCount"] == 12000

    again = client.put(
        f"/api/admin/influencer-applications/{application['id']}",
        json={"status": "REJECTED"},
        headers=admin.headers,
    )
    assert again.status_code == 409

    mine = client.get("/api/influencer/apply", headers=applicant.headers).json()
    assert mine["application"]["status"] == "APPROVED"


def test_application_needs_a_channel(client, make_user):
    r = _apply(client, make_user(), instagramHandle=None)
    assert r.status_code == 400


def test_admin_routes_are_admin_only(client, make_user):
    moderator = make_user(role="MODERATOR")
    assert client.get("/api/admin/influencer-applications", headers=moderator.headers).status_code == 403
    assert client.get("/api/admin/restaurant-claims", headers=moderator.headers).status_code == 403


def test_claim_approval_transfers_ownership(client, make_user, make_restaurant):
    claimant = make_user()
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(make_user(), name="Unclaimed Grill")

    r = _claim(client, claimant, restaurant["id"])
    assert r.status_code == 201
    claim = r.json()["claim"]
    assert claim["isDispute"] is False
    assert claim["restaurant"]["name"] == "Unclaimed Grill"
    assert _claim(client, claimant, restaurant["id"]).status_code == 409

    mine = client.get(f"/api/restaurants/{restaurant['id']}/claim", headers=claimant.headers).json()
    assert mine["claim"]["id"] == claim["id"]

    r = client.put(
        f"/api/admin/restaurant-claims/{claim['id']}",
        json={"status": "APPROVED"},
        headers=admin.headers,
    )
    assert r.status_code == 200
    assert r.json()["claim"]["status"] == "APPROVED"

    detail = client.get(f"/api/restaurants/{restaurant['id']}").json()["restaurant"]
    assert detail["ownerId"] == claimant.id
    assert detail["verified"] is True
    me = client.get("/api/auth/me", headers=claimant.headers).json()
    assert me["user"]["role"] == "OWNER"

    notes = client.get("/api/notifications", headers=claimant.headers).json()["notifications"]
    assert any(n["type"] == "restaurant_claim_approved" for n in notes)


def test_claim_on_owned_restaurant_is_a_dispute(client, make_user, make_restaurant):
    owner = make_user(role="OWNER")
    challenger = make_user()
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(owner, name="Contested Kitchen")

    assert _claim(client, owner, restaurant["id"]).status_code == 409

    claim = _claim(client, challenger, restaurant["id"]).json()["claim"]
    assert claim["isDispute"] is True

    owner_notes = client.get("/api/notifications", headers=owner.headers).json()["notifications"]
    assert any(n["type"] == "restaurant_claim_dispute" for n in owner_notes)
    admin_notes = client.get("/api/notifications", headers=admin.headers).json()["notifications"]
    assert any(n["type"] == "restaurant_claim_dispute_admin" for n in admin_notes)

    r = client.put(
        f"/api/admin/restaurant-claims/{claim['id']}",
        json={"status": "REJECTED", "notes": "Insufficient proof"},
        headers=admin.headers,
    )
    assert r.json()["message"] == "Claim rejected"
    detail = client.get(f"/api/restaurants/{restaurant['id']}").json()["restaurant"]
    assert detail["ownerId"] == owner.id


def test_claims_list_filters_by_status(client, make_user, make_restaurant):
    admin = make_user(role="ADMIN")
    restaurant = make_restaurant(make_user())
    _claim(client, make_user(), restaurant["id"])

    pending = client.get("/api/admin/restaurant-claims", params={"status": "PENDING"}, headers=admin.headers)
    assert pending.json()["pagination"]["total"] == 1
    approved = client.get("/api/admin/restaurant-claims", params={"status": "APPROVED"}, headers=admin.headers)
    assert approved.json()["pagination"]["total"] == 0


def test_promotions_never_demote():
    assert promoted_role(UserRole.USER, UserRole.OWNER) == UserRole.OWNER
    assert promoted_role(UserRole.ADMIN, UserRole.OWNER) == UserRole.ADMIN
    assert promoted_role(UserRole.MODERATOR, UserRole.INFLUENCER) == UserRole.MODERATOR


def test_claim_transition_write_set():
    result = claim_transition("PENDING", "APPROVED", "u1", "USER")
    assert result.approved
    assert result.user.role == UserRole.OWNER
    assert result.restaurant.owner_id == "u1"
    assert result.restaurant.verified is True

    rejected = claim_transition("PENDING", "REJECTED", "u1", "USER")
    assert rejected.restaurant is None
    assert rejected.notification_type == "restaurant_claim_rejected"

    admin_claim = claim_transition("PENDING", "APPROVED", "u2", "ADMIN")
    assert admin_claim.user.role is None


def test_influencer_transition_write_set():
    result = influencer_transition(
        "PENDING", "APPROVED", "USER", {"instagram": "@a", "youtube": None, "tiktok": ""}, 500
    )
    assert result.status == ApplicationStatus.APPROVED
    assert result.user.verified is True
    assert result.user.social_links == {"instagram": "@a"}
    assert result.user.follower_count == 500


def test_transitions_reject_bad_input():
    with pytest.raises(Conflict):
        claim_transition("APPROVED", "REJECTED", "u1", "USER")
    with pytest.raises(ValidationFailed):
        influencer_transition("PENDING", "PENDING", "USER", {}, 0)
