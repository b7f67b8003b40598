"""
One ranking function for every "trending" list.

A policy is a set of signal weights plus an age decay exponent:

    score = sum(weight * signal) / (age_hours + 1) ** decay

Reviews and restaurants differ only in the policy they pass in; weights
come from settings so they can be tuned without a deploy.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from taste_trail.core.config import settings

T = TypeVar("T")


@dataclass(frozen=True)
class RankingPolicy:
    weights: Mapping[str, float] = field(default_factory=dict)
    decay_exponent: float = 0.0

    def score(self, signals: Mapping[str, float], age_hours: float = 0.0) -> float:
        raw = sum(weight * float(signals.get(name, 0) or 0) for name, weight in self.weights.items())
        if not self.decay_exponent:
            return raw
        return raw / (max(age_hours, 0.0) + 1) ** self.decay_exponent

    def rank(
        self,
        items: Iterable[T],
        signals_of: Callable[[T], Mapping[str, float]],
        created_at_of: Optional[Callable[[T], datetime]] = None,
        now: Optional[datetime] = None,
    ) -> List[Tuple[T, float]]:
        """Highest score first; sorted() is stable so ties keep the input order."""
        now = now or datetime.utcnow()
        scored = []
        for item in items:
            age = 0.0
            if created_at_of is not None:
                age = (now - created_at_of(item)).total_seconds() / 3600
            scored.append((item, self.score(signals_of(item), age)))
        return sorted(scored, key=lambda pair: pair[1], reverse=True)


def review_trending_policy() -> RankingPolicy:
    return RankingPolicy(
        weights=dict(settings.REVIEW_TRENDING_WEIGHTS),
        decay_exponent=settings.REVIEW_TRENDING_DECAY,
    )


def restaurant_trending_policy() -> RankingPolicy:
    return RankingPolicy(
        weights=dict(settings.RESTAURANT_TRENDING_WEIGHTS),
        decay_exponent=settings.RESTAURANT_TRENDING_DECAY,
    )


def trend_direction(recent: int, previous: int) -> str:
    if recent > previous * 1.2:
        return "up"
    if recent < previous * 0.8:
        return "down"
    return "stable"


def review_signals(likes: int, comments: int, rating: float, shares: int = 0) -> Dict[str, float]:
    # shares are not tracked yet and always arrive as 0
    return {"likes": likes, "comments": comments, "shares": shares, "rating": rating}
