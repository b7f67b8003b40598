# taste_trail/domains/applications/transitions.py
"""
Approval workflows as explicit transitions.

Each function takes the record's current state and the reviewer's decision
and returns the complete write set. Services apply a write set inside one
transaction, so the claim, the user and the restaurant change together or
not at all.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from taste_trail.core.exceptions import Conflict, ValidationFailed
from taste_trail.domains.auth.entities import UserRole


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Promotions only ever move up this ladder
ROLE_RANK = {
    UserRole.USER: 0,
    UserRole.INFLUENCER: 1,
    UserRole.OWNER: 1,
    UserRole.MODERATOR: 2,
    UserRole.ADMIN: 3,
}


def promoted_role(current: UserRole, target: UserRole) -> UserRole:
    current, target = UserRole(current), UserRole(target)
    return target if ROLE_RANK[target] > ROLE_RANK[current] else current


@dataclass
class UserWrites:
    role: Optional[UserRole] = None
    verified: Optional[bool] = None
    social_links: Optional[dict] = None
    follower_count: Optional[int] = None


@dataclass
class RestaurantWrites:
    owner_id: Optional[str] = None
    verified: Optional[bool] = None


@dataclass
class TransitionResult:
    status: ApplicationStatus
    notification_type: str
    user: UserWrites = field(default_factory=UserWrites)
    restaurant: Optional[RestaurantWrites] = None

    @property
    def approved(self) -> bool:
        return self.status == ApplicationStatus.APPROVED


def _decision(current_status: str, decision: str) -> ApplicationStatus:
    if ApplicationStatus(current_status) != ApplicationStatus.PENDING:
        raise Conflict("Application has already been reviewed")
    try:
        outcome = ApplicationStatus(decision)
    except ValueError:
        raise ValidationFailed("Decision must be APPROVED or REJECTED")
    if outcome == ApplicationStatus.PENDING:
        raise ValidationFailed("Decision must be APPROVED or REJECTED")
    return outcome


def claim_transition(current_status: str, decision: str, claimant_id: str, claimant_role: str) -> TransitionResult:
    outcome = _decision(current_status, decision)
    if outcome == ApplicationStatus.REJECTED:
        return TransitionResult(status=outcome, notification_type="restaurant_claim_rejected")

    new_role = promoted_role(claimant_role, UserRole.OWNER)
    return TransitionResult(
        status=outcome,
        notification_type="restaurant_claim_approved",
        user=UserWrites(role=new_role if new_role != UserRole(claimant_role) else None),
        restaurant=RestaurantWrites(owner_id=claimant_id, verified=True),
    )


def influencer_transition(
    current_status: str,
    decision: str,
    applicant_role: str,
    social_links: dict,
    follower_count: int,
) -> TransitionResult:
    outcome = _decision(current_status, decision)
    if outcome == ApplicationStatus.REJECTED:
        return TransitionResult(status=outcome, notification_type="influencer_rejected")

    new_role = promoted_role(applicant_role, UserRole.INFLUENCER)
    return TransitionResult(
        status=outcome,
        notification_type="influencer_approved",
        user=UserWrites(
            role=new_role if new_role != UserRole(applicant_role) else None,
            verified=True,
            social_links={k: v for k, v in social_links.items() if v},
            follower_count=follower_count,
        ),
    )
