# taste_trail/domains/reviews/events.py
import asyncio

from kombu.exceptions import OperationalError

from taste_trail.core.config import settings
from taste_trail.core.database import session_scope
from taste_trail.core.event_bus import event_bus
from taste_trail.core.redis import cache
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.shared.schemas.events import ModerationApplied, ReviewChanged, ReviewCreated
from taste_trail.shared.utils.logger import get_logger
from taste_trail.tasks.enrichment import enrich_review_task
from .enrichment import review_enricher

logger = get_logger(__name__)

TRENDING_RESTAURANTS_KEY = "restaurants:trending"


async def invalidate_review_caches():
    removed = await cache.invalidate_pattern("timeline:*")
    await cache.delete(TRENDING_RESTAURANTS_KEY)
    logger.debug(f"Invalidated {removed} timeline pages")


async def dispatch_enrichment(review_id: str, content: str, restaurant_name: str):
    if not review_enricher.enabled:
        return
    if settings.AI_ENRICHMENT_BACKEND == "celery":
        try:
            await asyncio.to_thread(enrich_review_task.delay, review_id, content, restaurant_name)
            return
        except OperationalError as e:
            logger.warning(f"Broker unavailable, enriching review {review_id} inline: {e}")
    await review_enricher.enrich(review_id, content, restaurant_name)


async def handle_review_created(event: ReviewCreated):
    async with session_scope() as db:
        restaurant = await restaurant_repository.get_restaurant(db, event.restaurant_id)
        owner_id = restaurant.owner_id if restaurant else None
        restaurant_name = restaurant.name if restaurant else "Unknown"

    if owner_id and owner_id != event.author_id:
        await notification_service.notify(
            "new_review",
            owner_id,
            from_id=event.author_id,
            review_id=event.review_id,
            data={
                "reviewer_name": event.author_name,
                "rating": event.rating,
                "restaurant_name": restaurant_name,
            },
        )
    await invalidate_review_caches()
    await dispatch_enrichment(event.review_id, event.content, restaurant_name)


async def handle_review_changed(event: ReviewChanged):
    await invalidate_review_caches()


async def handle_moderation_applied(event: ModerationApplied):
    if event.hidden_content:
        await invalidate_review_caches()


def register_event_handlers():
    event_bus.subscribe("review:created", handle_review_created)
    event_bus.subscribe("review:changed", handle_review_changed)
    event_bus.subscribe("moderation:applied", handle_moderation_applied)
