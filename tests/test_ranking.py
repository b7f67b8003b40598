from datetime import datetime, timedelta

from taste_trail.shared.utils.ranking import RankingPolicy, review_signals, review_trending_policy, trend_direction


def test_score_without_decay():
    policy = RankingPolicy(weights={"likes": 0.5, "rating": 0.1})
    assert policy.score({"likes": 4, "rating": 5}) == 2.5


def test_decay_favours_fresh_items():
    now = datetime(2024, 5, 1, 12, 0)
    policy = RankingPolicy(weights={"likes": 1.0}, decay_exponent=1.5)
    items = [("old", now - timedelta(hours=48)), ("new", now - timedelta(hours=1))]
    ranked = policy.rank(items, lambda item: {"likes": 10}, lambda item: item[1], now=now)
    assert [item[0] for item, _ in ranked] == ["new", "old"]


def test_ties_keep_input_order():
    policy = RankingPolicy(weights={"likes": 1.0})
    ranked = policy.rank(["a", "b", "c"], lambda item: {"likes": 1})
    assert [item for item, _ in ranked] == ["a", "b", "c"]


def test_review_signals_default_shares():
    assert review_signals(3, 2, 4.0) == {"likes": 3, "comments": 2, "shares": 0, "rating": 4.0}


def test_trend_direction():
    assert trend_direction(5, 2) == "up"
    assert trend_direction(1, 5) == "down"
    assert trend_direction(10, 10) == "stable"
    assert trend_direction(0, 0) == "stable"



def test_review_score_grows_with_likes_and_comments():
    policy = review_trending_policy()
    base = policy.score(review_signals(likes=2, comments=1, rating=4), age_hours=3)
    assert policy.score(review_signals(likes=3, comments=1, rating=4), age_hours=3) > base
    assert policy.score(review_signals(likes=2, comments=2, rating=4), age_hours=3) > base
    assert policy.score(review_signals(likes=2, comments=1, rating=4), age_hours=30) < base
