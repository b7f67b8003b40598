import anthropic
import httpx
import pytest

from taste_trail.core.config import settings
from taste_trail.core.exceptions import UpstreamUnavailable
from taste_trail.domains.reviews import events
from taste_trail.domains.reviews.enrichment import parse_sentiment, parse_tags, review_enricher


def test_parse_sentiment():
    assert parse_sentiment("positive.") == "POSITIVE"
    assert parse_sentiment("  NEGATIVE\n") == "NEGATIVE"
    assert parse_sentiment("It is mostly good") is None
    assert parse_sentiment("") is None


def test_parse_tags():
    assert parse_tags("carbonara, cozy , , family-friendly") == ["carbonara", "cozy", "family-friendly"]
    assert parse_tags(", ".join(f"tag{i}" for i in range(12))) == [f"tag{i}" for i in range(8)]
    assert parse_tags("x" * 40) == []


def test_enrichment_is_off_without_a_key(monkeypatch):
    monkeypatch.setattr(settings, "AI_ENRICHMENT_ENABLED", True)
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", None)
    assert review_enricher.enabled is False


@pytest.fixture
def enrichment_on(monkeypatch):
    monkeypatch.setattr(settings, "AI_ENRICHMENT_ENABLED", True)
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "test-key")


def test_new_review_is_enriched(client, make_user, make_restaurant, make_review, enrichment_on, monkeypatch):
    seen = {}

    async def fake_analyze(content, restaurant_name="Unknown"):
        seen["restaurant"] = restaurant_name
        return "POSITIVE", ["pasta", "cozy"]

    monkeypatch.setattr(review_enricher, "analyze", fake_analyze)
    restaurant = make_restaurant(make_user(), name="Nonna's")
    review = make_review(make_user(), restaurant["id"])

    shown = client.get(f"/api/reviews/{review['id']}").json()["review"]
    assert shown["sentiment"] == "POSITIVE"
    assert shown["tags"] == ["pasta", "cozy"]
    assert seen["restaurant"] == "Nonna's"


class _FailingMessages:
    async def create(self, **kwargs):
        raise anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


class _FailingClient:
    messages = _FailingMessages()


async def test_api_errors_surface_as_upstream_unavailable(monkeypatch):
    monkeypatch.setattr(review_enricher, "_client", _FailingClient())
    with pytest.raises(UpstreamUnavailable):
        await review_enricher.analyze("Lovely carbonara and a warm welcome.", "Nonna's")


def test_api_failure_leaves_review_untouched(client, make_user, make_restaurant, make_review, enrichment_on, monkeypatch):
    monkeypatch.setattr(review_enricher, "_client", _FailingClient())
    restaurant = make_restaurant(make_user())
    review = make_review(make_user(), restaurant["id"])

    shown = client.get(f"/api/reviews/{review['id']}").json()["review"]
    assert shown["sentiment"] is None
    assert shown["tags"] == []


class _RecordingTask:
    def __init__(self):
        self.calls = []

    def delay(self, *args):
        self.calls.append(args)


def test_enrichment_is_queued_on_the_worker(client, make_user, make_restaurant, make_review, enrichment_on, monkeypatch):
    task = _RecordingTask()
    monkeypatch.setattr(settings, "AI_ENRICHMENT_BACKEND", "celery")
    monkeypatch.setattr(events, "enrich_review_task", task)

    async def must_not_run(*args, **kwargs):
        raise AssertionError("enrichment ran inside the request")

    monkeypatch.setattr(review_enricher, "analyze", must_not_run)
    restaurant = make_restaurant(make_user(), name="Queued Kitchen")
    review = make_review(make_user(), restaurant["id"])

    assert task.calls == [(review["id"], review["content"], "Queued Kitchen")]


def test_nothing_is_queued_while_disabled(client, make_user, make_restaurant, make_review, monkeypatch):
    task = _RecordingTask()
    monkeypatch.setattr(settings, "AI_ENRICHMENT_BACKEND", "celery")
    monkeypatch.setattr(events, "enrich_review_task", task)
    make_review(make_user(), make_restaurant(make_user())["id"])
    assert task.calls == []
