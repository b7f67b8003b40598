# taste_trail/domains/applications/service.py
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.exceptions import Conflict, NotFound
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.restaurants.schemas import RestaurantSummary
from taste_trail.shared.schemas.base import page_offset, paginated
from taste_trail.shared.utils.logger import get_logger
from . import repository
from .models import InfluencerApplication, RestaurantClaim
from .schemas import ClaimOut, ClaimRequest, InfluencerApplicationOut, InfluencerApplyRequest, ReviewDecision
from .transitions import UserWrites, claim_transition, influencer_transition

logger = get_logger(__name__)

ADMIN_ONLY = [UserRole.ADMIN.value]


async def _apply_user_writes(db: AsyncSession, user: User, writes: UserWrites):
    if writes.role is not None:
        user.role = writes.role.value
    if writes.verified is not None:
        user.verified = writes.verified
    if writes.social_links is not None or writes.follower_count is not None:
        profile = await auth_repository.get_or_create_profile(db, user.id)
        if writes.social_links is not None:
            profile.social_links = {**(profile.social_links or {}), **writes.social_links}
        if writes.follower_count is not None:
            profile.follower_count = writes.follower_count


class ApplicationService:
    async def _present_claims(self, db: AsyncSession, claims: Sequence[RestaurantClaim]) -> List[ClaimOut]:
        users = await auth_repository.get_users_by_ids(db, (c.user_id for c in claims))
        names = await restaurant_repository.get_names(db, (c.restaurant_id for c in claims))
        items = []
        for claim in claims:
            item = ClaimOut.model_validate(claim)
            user = users.get(claim.user_id)
            item.user = UserSummary.model_validate(user) if user else None
            item.restaurant = RestaurantSummary(id=claim.restaurant_id, name=names.get(claim.restaurant_id, ""))
            items.append(item)
        return items

    async def _present_applications(
        self, db: AsyncSession, applications: Sequence[InfluencerApplication]
    ) -> List[InfluencerApplicationOut]:
        users = await auth_repository.get_users_by_ids(db, (a.user_id for a in applications))
        items = []
        for application in applications:
            item = InfluencerApplicationOut.model_validate(application)
            user = users.get(application.user_id)
            item.user = UserSummary.model_validate(user) if user else None
            items.append(item)
        return items

    # Restaurant claims

    async def submit_claim(self, db: AsyncSession, user: User, restaurant_id: str, data: ClaimRequest) -> dict:
        restaurant = await restaurant_repository.get_restaurant(db, restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")
        if restaurant.owner_id == user.id:
            raise Conflict("You already own this restaurant")
        existing = await repository.get_user_claim(db, user.id, restaurant_id)
        if existing:
            raise Conflict(f"You already have a {existing.status.lower()} claim for this restaurant")

        claimant_id, claimant_name = user.id, user.name
        owner_id, restaurant_name = restaurant.owner_id, restaurant.name
        is_dispute = owner_id is not None
        try:
            claim = await repository.create_claim(
                db, user_id=claimant_id, restaurant_id=restaurant_id, is_dispute=is_dispute, **data.model_dump()
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("You already have a claim for this restaurant")

        logger.info(f"Claim {claim.id} on {restaurant_id} by {claimant_id} (dispute={is_dispute})")
        payload = {
            "claimant_name": claimant_name,
            "restaurant_name": restaurant_name,
            "claim_id": claim.id,
            "position": data.position,
        }
        if is_dispute:
            await notification_service.notify("restaurant_claim_dispute", owner_id, from_id=claimant_id, data=payload)
        await notification_service.notify_roles(
            ADMIN_ONLY,
            "restaurant_claim_dispute_admin" if is_dispute else "restaurant_claim_received",
            from_id=claimant_id,
            data={**payload, "is_dispute": is_dispute},
        )
        message = (
            "Dispute claim submitted. Both parties will be notified of the decision."
            if is_dispute
            else "Claim submitted. You will be notified of the decision."
        )
        return {"message": message, "claim": (await self._present_claims(db, [claim]))[0]}

    async def get_my_claim(self, db: AsyncSession, user: User, restaurant_id: str) -> Optional[ClaimOut]:
        claim = await repository.get_user_claim(db, user.id, restaurant_id)
        return (await self._present_claims(db, [claim]))[0] if claim else None

    async def list_claims(self, db: AsyncSession, status: Optional[str], page: int, limit: int) -> dict:
        claims, total = await repository.list_records(db, RestaurantClaim, status, page_offset(page, limit), limit)
        return paginated("claims", await self._present_claims(db, claims), page, limit, total)

    async def review_claim(self, db: AsyncSession, reviewer: User, claim_id: str, decision: ReviewDecision) -> ClaimOut:
        claim = await repository.get_claim(db, claim_id)
        if not claim:
            raise NotFound("Claim")
        claimant = await auth_repository.get_user_by_id(db, claim.user_id)
        restaurant = await restaurant_repository.get_restaurant(db, claim.restaurant_id)
        if not claimant or not restaurant:
            raise NotFound("Claim")

        result = claim_transition(claim.status, decision.status.value, claimant.id, claimant.role)
        reviewer_id, claimant_id, restaurant_name = reviewer.id, claimant.id, restaurant.name

        if not await repository.mark_reviewed(
            db, RestaurantClaim, claim_id, result.status.value, reviewer_id, decision.notes
        ):
            await db.rollback()
            raise Conflict("Application has already been reviewed")
        await _apply_user_writes(db, claimant, result.user)
        if result.restaurant is not None:
            restaurant.owner_id = result.restaurant.owner_id
            restaurant.verified = result.restaurant.verified
        await db.commit()
        await db.refresh(claim)

        logger.info(f"Claim {claim_id} {result.status.value.lower()} by {reviewer_id}")
        await notification_service.notify(
            result.notification_type,
            claimant_id,
            from_id=reviewer_id,
            data={"restaurant_name": restaurant_name, "notes": decision.notes or ""},
        )
        return (await self._present_claims(db, [claim]))[0]

    # Influencer applications

    async def apply_influencer(self, db: AsyncSession, user: User, data: InfluencerApplyRequest) -> InfluencerApplicationOut:
        if await repository.get_user_application(db, user.id):
            raise Conflict("You already have an application submitted")

        applicant_id, applicant_name = user.id, user.name
        try:
            application = await repository.create_application(db, user_id=applicant_id, **data.model_dump())
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("You already have an application submitted")

        await notification_service.notify_roles(
            ADMIN_ONLY,
            "influencer_application_received",
            from_id=applicant_id,
            data={
                "applicant_name": applicant_name,
                "application_id": application.id,
                "follower_count": application.follower_count,
            },
        )
        return (await self._present_applications(db, [application]))[0]

    async def get_my_application(self, db: AsyncSession, user: User) -> Optional[InfluencerApplicationOut]:
        application = await repository.get_user_application(db, user.id)
        return (await self._present_applications(db, [application]))[0] if application else None

    async def list_applications(self, db: AsyncSession, status: Optional[str], page: int, limit: int) -> dict:
        applications, total = await repository.list_records(
            db, InfluencerApplication, status, page_offset(page, limit), limit
        )
        return paginated("applications", await self._present_applications(db, applications), page, limit, total)

    async def review_application(
        self, db: AsyncSession, reviewer: User, application_id: str, decision: ReviewDecision
    ) -> InfluencerApplicationOut:
        application = await repository.get_application(db, application_id)
        if not application:
            raise NotFound("Application")
        applicant = await auth_repository.get_user_by_id(db, application.user_id)
        if not applicant:
            raise NotFound("Application")

        result = influencer_transition(
            application.status,
            decision.status.value,
            applicant.role,
            {
                "instagram": application.instagram_handle,
                "youtube": application.youtube_channel,
                "tiktok": application.tiktok_handle,
            },
            application.follower_count,
        )
        reviewer_id, applicant_id = reviewer.id, applicant.id

        if not await repository.mark_reviewed(
            db, InfluencerApplication, application_id, result.status.value, reviewer_id, decision.notes
        ):
            await db.rollback()
            raise Conflict("Application has already been reviewed")
        await _apply_user_writes(db, applicant, result.user)
        await db.commit()
        await db.refresh(application)

        logger.info(f"Influencer application {application_id} {result.status.value.lower()} by {reviewer_id}")
        await notification_service.notify(
            result.notification_type,
            applicant_id,
            from_id=reviewer_id,
            data={"notes": decision.notes or ""},
        )
        return (await self._present_applications(db, [application]))[0]


application_service = ApplicationService()
