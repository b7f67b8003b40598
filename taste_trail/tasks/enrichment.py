from asgiref.sync import async_to_sync

from taste_trail.core.celery import celery_app
from taste_trail.domains.reviews.enrichment import review_enricher


@celery_app.task
def enrich_review_task(review_id: str, content: str, restaurant_name: str = "Unknown"):
    return async_to_sync(review_enricher.enrich)(review_id, content, restaurant_name)
