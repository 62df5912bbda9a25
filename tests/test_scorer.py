from datetime import datetime, timedelta, timezone

import pytest

from models.scorer import Intent, ProfileFacts, common_interests, score, score_breakdown

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def facts(interests=(), location=None, intent=Intent.ALL, age_days=0.0):
    return ProfileFacts(tuple(interests), location, intent, NOW - timedelta(days=age_days))


def test_identical_profiles_score_one():
    a = facts(["music", "hiking"], "Lagos", Intent.DATING)
    assert score(a, a, now=NOW) == pytest.approx(1.0)


def test_half_interest_overlap_scenario():
    viewer = facts(["music", "hiking"], "Berlin")
    candidate = facts(["music", "art"], "Berlin")
    assert score(viewer, candidate, now=NOW) == pytest.approx(0.8)


def test_empty_interests_contribute_nothing():
    viewer = facts([], "Berlin")
    candidate = facts(["music"], "Berlin")
    assert score(viewer, candidate, now=NOW) == pytest.approx(0.6)
    assert score(candidate, viewer, now=NOW) == pytest.approx(0.6)


def test_interest_ratio_uses_larger_list():
    viewer = facts(["a", "b"])
    candidate = facts(["a", "b", "c", "d"])
    breakdown = score_breakdown(viewer, candidate, now=NOW)
    assert breakdown["interests"]["score"] == pytest.approx(0.2)


def test_interest_match_is_case_sensitive():
    assert common_interests(["Music", "art"], ["music", "art"]) == ["art"]


@pytest.mark.parametrize("mine, theirs, expected", [
    ("  Lagos ", "lagos", 0.3),
    ("Lagos", "Lagos Island", 0.15),
    ("Lagos Island", "Lagos", 0.15),
    ("Lagos", "Abuja", 0.0),
    (None, "Lagos", 0.0),
    ("", "", 0.0),
])
def test_location_pillar(mine, theirs, expected):
    breakdown = score_breakdown(facts(location=mine), facts(location=theirs), now=NOW)
    assert breakdown["location"]["score"] == pytest.approx(expected)


@pytest.mark.parametrize("mine, theirs, expected", [
    (Intent.ALL, Intent.DATING, 0.2),
    (Intent.HOBBY, Intent.ALL, 0.2),
    (Intent.DATING, Intent.DATING, 0.2),
    (Intent.FRIENDSHIP, Intent.HOBBY, 0.1),
    (Intent.HOBBY, Intent.FRIENDSHIP, 0.1),
    (Intent.DATING, Intent.FRIENDSHIP, 0.1),
    (Intent.DATING, Intent.HOBBY, 0.0),
])
def test_intent_pillar(mine, theirs, expected):
    breakdown = score_breakdown(facts(intent=mine), facts(intent=theirs), now=NOW)
    assert breakdown["intent"]["score"] == pytest.approx(expected)


@pytest.mark.parametrize("age_days, expected", [
    (0, 0.1),
    (15, 0.05),
    (30, 0.0),
    (400, 0.0),
    (-3, 0.1),
])
def test_recency_decays_over_thirty_days(age_days, expected):
    breakdown = score_breakdown(facts(), facts(age_days=age_days), now=NOW)
    assert breakdown["recency"]["score"] == pytest.approx(expected)


def test_score_is_not_symmetric():
    fresh = facts(["x"], "Paris", age_days=0)
    stale = facts(["x"], "Paris", age_days=30)
    assert score(fresh, stale, now=NOW) == pytest.approx(0.9)
    assert score(stale, fresh, now=NOW) == pytest.approx(1.0)


def test_naive_timestamps_are_treated_as_utc():
    naive = ProfileFacts(("x",), None, Intent.ALL, NOW.replace(tzinfo=None))
    assert score(naive, naive, now=NOW) == pytest.approx(0.4 + 0.2 + 0.1)


def test_score_stays_within_bounds():
    cases = [
        (facts(), facts(age_days=1000)),
        (facts(["a"] * 3, "x", Intent.DATING), facts(["a"], "x", Intent.HOBBY, age_days=-10)),
        (facts(["a", "b"], "Rome", Intent.ALL), facts(["a", "b"], "rome", Intent.ALL)),
    ]
    for viewer, candidate in cases:
        assert 0.0 <= score(viewer, candidate, now=NOW) <= 1.0


def test_breakdown_sums_to_score():
    viewer = facts(["music", "hiking", "chess"], "Accra", Intent.FRIENDSHIP)
    candidate = facts(["chess"], "Accra Central", Intent.HOBBY, age_days=6)
    breakdown = score_breakdown(viewer, candidate, now=NOW)
    total = sum(p["score"] for p in breakdown.values())
    assert total == pytest.approx(score(viewer, candidate, now=NOW), abs=1e-5)
    assert breakdown["interests"]["reasons"][0] == "1 shared interest(s)"
