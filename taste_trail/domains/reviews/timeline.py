# taste_trail/domains/reviews/timeline.py
from typing import Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.config import settings
from taste_trail.core.exceptions import AuthenticationRequired
from taste_trail.core.redis import cache
from taste_trail.domains.auth.entities import VERIFIED_AUTHOR_ROLES
from taste_trail.domains.auth.models import User
from taste_trail.domains.social import repository as social_repository
from taste_trail.shared.schemas.base import page_offset, paginated
from taste_trail.shared.utils.logger import get_logger
from taste_trail.shared.utils.ranking import review_signals, review_trending_policy
from . import repository
from .schemas import TimelineFilter
from .service import present_reviews

logger = get_logger(__name__)

TRENDING_POOL_FACTOR = 5
HIGH_RATED_MIN = 4


def timeline_cache_key(filter_: TimelineFilter, page: int, limit: int) -> str:
    return f"timeline:{filter_.value}:{page}:{limit}"


class TimelineService:
    async def timeline(
        self,
        db: AsyncSession,
        viewer: Optional[User],
        filter_: TimelineFilter = TimelineFilter.ALL,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        viewer_id = viewer.id if viewer else None
        if filter_ == TimelineFilter.FOLLOWING:
            if not viewer:
                raise AuthenticationRequired("Sign in to see your following feed")
            followees = await social_repository.get_following_ids(db, viewer.id)
            reviews, total = await repository.list_reviews(
                db, author_ids=followees, offset=page_offset(page, limit), limit=limit
            )
            return paginated("reviews", await present_reviews(db, reviews, viewer_id), page, limit, total)

        key = timeline_cache_key(filter_, page, limit)
        payload = await cache.get_json(key)
        if payload is None:
            payload = jsonable_encoder(await self._build(db, filter_, page, limit))
            await cache.set_json(key, payload, settings.TIMELINE_CACHE_TTL)

        # the cached page is viewer-neutral; likes are personal
        if viewer_id:
            liked = await repository.liked_review_ids(db, viewer_id, [r["id"] for r in payload["reviews"]])
            for item in payload["reviews"]:
                item["isLiked"] = item["id"] in liked
        return payload

    async def _build(self, db: AsyncSession, filter_: TimelineFilter, page: int, limit: int) -> dict:
        if filter_ == TimelineFilter.TRENDING:
            return await self._trending(db, page, limit)

        criteria = {}
        if filter_ == TimelineFilter.VERIFIED:
            criteria["author_roles"] = [r.value for r in VERIFIED_AUTHOR_ROLES]
        elif filter_ == TimelineFilter.HIGH_RATED:
            criteria["min_rating"] = HIGH_RATED_MIN
        reviews, total = await repository.list_reviews(
            db, offset=page_offset(page, limit), limit=limit, **criteria
        )
        return paginated("reviews", await present_reviews(db, reviews), page, limit, total)

    async def _trending(self, db: AsyncSession, page: int, limit: int) -> dict:
        # rank a window of the newest reviews, then paginate inside that window
        pool, total = await repository.list_reviews(db, offset=0, limit=limit * TRENDING_POOL_FACTOR)
        ids = [r.id for r in pool]
        likes = await repository.like_counts(db, ids)
        comments = await repository.comment_counts(db, ids)

        ranked = review_trending_policy().rank(
            pool,
            lambda r: review_signals(likes.get(r.id, 0), comments.get(r.id, 0), r.rating),
            lambda r: r.created_at,
        )
        start = page_offset(page, limit)
        window = ranked[start:start + limit]
        items = await present_reviews(db, [review for review, _ in window])
        for item, (_, score) in zip(items, window):
            item.trending_score = score
        return paginated("reviews", items, page, limit, total)


timeline_service = TimelineService()
