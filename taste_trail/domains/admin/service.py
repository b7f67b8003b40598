# taste_trail/domains/admin/service.py
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.domains.applications import repository as application_repository
from taste_trail.domains.applications.models import InfluencerApplication, RestaurantClaim
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.schemas import UserOut
from taste_trail.domains.moderation import repository as moderation_repository
from taste_trail.domains.moderation.entities import ReportStatus
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.reviews import repository as review_repository
from taste_trail.shared.schemas.base import page_offset, paginated


class AdminService:
    async def dashboard(self, db: AsyncSession) -> dict:
        by_role = await auth_repository.count_users_by_role(db)
        users = {role.value: by_role.get(role.value, 0) for role in UserRole}
        return {
            "users": {"total": sum(users.values()), "byRole": users},
            "restaurants": await restaurant_repository.count_restaurants(db),
            "reviews": await review_repository.count_reviews(db),
            "pendingReports": await moderation_repository.count_reports(db, ReportStatus.PENDING.value),
            "pendingClaims": await application_repository.count_pending(db, RestaurantClaim),
            "pendingApplications": await application_repository.count_pending(db, InfluencerApplication),
            "activeFlags": await moderation_repository.count_flags(db),
        }

    async def list_users(
        self, db: AsyncSession, role: Optional[str], search: Optional[str], page: int, limit: int
    ) -> dict:
        users, total = await auth_repository.search_users(db, role, search, page_offset(page, limit), limit)
        ids = [u.id for u in users]
        strikes = await moderation_repository.count_active_strikes_for(db, ids)
        banned = await moderation_repository.get_banned_user_ids(db, ids)
        items = [
            {
                **UserOut.model_validate(u).model_dump(by_alias=True),
                "strikeCount": strikes.get(u.id, 0),
                "banned": u.id in banned,
            }
            for u in users
        ]
        return paginated("users", items, page, limit, total)


admin_service = AdminService()
