# taste_trail/domains/reviews/enrichment.py
"""
Optional AI enrichment of new reviews: a sentiment label and a few tags.

Runs after the review is committed. Any failure (no key, API error, odd
reply) leaves the review exactly as it was written.
"""
import asyncio
from typing import List, Optional

import anthropic

from taste_trail.core.config import settings
from taste_trail.core.database import session_scope
from taste_trail.core.exceptions import UpstreamUnavailable
from taste_trail.shared.utils.logger import get_logger
from . import repository

logger = get_logger(__name__)

SENTIMENTS = ("POSITIVE", "NEUTRAL", "NEGATIVE")
MAX_TAGS = 8
MAX_TAG_LENGTH = 30
CONTENT_LIMIT = 500

SENTIMENT_PROMPT = (
    "Classify the sentiment of this restaurant review as POSITIVE, NEUTRAL, or NEGATIVE. "
    'Reply with only one word:\n\n"{content}"'
)
TAGS_PROMPT = (
    "Extract key tags from this restaurant review. Include only: dish names, cuisine types, "
    'and notable attributes (e.g., "cozy", "romantic", "family-friendly"). '
    "Return as comma-separated list, max 8 tags:\n\n"
    'Restaurant: {restaurant}\nReview: "{content}"'
)


def parse_sentiment(text: str) -> Optional[str]:
    label = (text or "").strip().strip(".").upper()
    return label if label in SENTIMENTS else None


def parse_tags(text: str) -> List[str]:
    tags = [t.strip() for t in (text or "").split(",")]
    return [t for t in tags if 0 < len(t) < MAX_TAG_LENGTH][:MAX_TAGS]


class ReviewEnricher:
    def __init__(self):
        self._client: Optional[anthropic.AsyncAnthropic] = None

    @property
    def enabled(self) -> bool:
        return settings.AI_ENRICHMENT_ENABLED and bool(settings.ANTHROPIC_API_KEY)

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY, timeout=8.0)
        return self._client

    async def _ask(self, prompt: str, max_tokens: int) -> str:
        try:
            raw = await self.client.messages.create(
                model=settings.AI_MODEL,
                max_tokens=max_tokens,
                temperature=0,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise UpstreamUnavailable("anthropic", str(e)) from e
        return "".join(block.text for block in raw.content if block.type == "text")

    async def analyze(self, content: str, restaurant_name: str = "Unknown") -> tuple[Optional[str], List[str]]:
        snippet = content[:CONTENT_LIMIT]
        sentiment_text, tags_text = await asyncio.gather(
            self._ask(SENTIMENT_PROMPT.format(content=snippet), max_tokens=10),
            self._ask(TAGS_PROMPT.format(restaurant=restaurant_name, content=snippet), max_tokens=100),
        )
        return parse_sentiment(sentiment_text), parse_tags(tags_text)

    async def enrich(self, review_id: str, content: str, restaurant_name: str = "Unknown") -> bool:
        if not self.enabled:
            return False
        try:
            sentiment, tags = await self.analyze(content, restaurant_name)
        except UpstreamUnavailable as e:
            logger.warning(f"AI enrichment skipped for review {review_id}: {e}")
            return False
        if sentiment is None and not tags:
            return False
        async with session_scope() as db:
            await repository.set_enrichment(db, review_id, sentiment, tags)
        logger.info(f"Review {review_id} enriched: sentiment={sentiment} tags={len(tags)}")
        return True


review_enricher = ReviewEnricher()
