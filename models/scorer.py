"""
models/scorer.py
════════════════
Compatibility scoring (0–1) between a viewer profile and a candidate profile.

Four Scoring Pillars
────────────────────
  Pillar 1 — Interest Overlap      0.40
      • |common| / max(|viewer|, |candidate|), literal tag match
  Pillar 2 — Location Fit          0.30
      • exact (trimmed, case-insensitive) match, or half weight on
        substring containment in either direction
  Pillar 3 — Intent Alignment      0.20
      • ALL on either side or equal intents, half weight for the
        FRIENDSHIP/HOBBY and DATING/FRIENDSHIP pairs
  Pillar 4 — Recency               0.10
      • linear decay over the candidate profile's first 30 days

The score is not symmetric: recency only looks at the candidate.

Usage
─────
  from models.scorer import ProfileFacts, score

  viewer    = ProfileFacts(["music", "hiking"], "Lagos", Intent.ALL, created)
  candidate = ProfileFacts(["music", "art"], "lagos", Intent.ALL, now)
  score(viewer, candidate, now=now)        # 0.8
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence


class Intent(str, Enum):
    DATING     = "DATING"
    FRIENDSHIP = "FRIENDSHIP"
    HOBBY      = "HOBBY"
    ALL        = "ALL"


PILLAR_WEIGHTS = {
    "interests": 0.40,
    "location":  0.30,
    "intent":    0.20,
    "recency":   0.10,
}

RECENCY_WINDOW_DAYS = 30

_COMPATIBLE_INTENTS: tuple[frozenset[Intent], ...] = (
    frozenset({Intent.FRIENDSHIP, Intent.HOBBY}),
    frozenset({Intent.DATING, Intent.FRIENDSHIP}),
)

_SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class ProfileFacts:
    """The slice of a profile the scorer looks at."""
    interests:  Sequence[str] = field(default_factory=tuple)
    location:   Optional[str] = None
    intent:     Intent = Intent.ALL
    created_at: Optional[datetime] = None

    @classmethod
    def from_profile(cls, profile: Any) -> "ProfileFacts":
        """Build facts from anything with interests / location / looking_for / created_at."""
        interests = profile.interests if isinstance(profile.interests, (list, tuple)) else []
        return cls(
            interests=tuple(interests),
            location=profile.location,
            intent=Intent(profile.looking_for),
            created_at=profile.created_at,
        )


# ─────────────────────────────────────────────────────────────────────────────
#  Pillar helpers
# ─────────────────────────────────────────────────────────────────────────────

def common_interests(viewer: Sequence[str], candidate: Sequence[str]) -> list[str]:
    """Viewer interests the candidate also lists, in viewer order."""
    theirs = set(candidate)
    return [tag for tag in viewer if tag in theirs]


def _interest_pillar(viewer: ProfileFacts, candidate: ProfileFacts) -> tuple[float, list[str]]:
    if not viewer.interests or not candidate.interests:
        return 0.0, ["No interests to compare"]
    common = common_interests(viewer.interests, candidate.interests)
    ratio = len(common) / max(len(viewer.interests), len(candidate.interests))
    reasons = [f"{len(common)} shared interest(s)"]
    if common:
        reasons.append("Shared: " + ", ".join(common[:5]))
    return ratio * PILLAR_WEIGHTS["interests"], reasons


def _location_pillar(viewer: ProfileFacts, candidate: ProfileFacts) -> tuple[float, list[str]]:
    mine = (viewer.location or "").strip().lower()
    theirs = (candidate.location or "").strip().lower()
    if not mine or not theirs:
        return 0.0, ["Location missing"]
    if mine == theirs:
        return PILLAR_WEIGHTS["location"], ["Same location"]
    if mine in theirs or theirs in mine:
        return PILLAR_WEIGHTS["location"] / 2, ["Nearby location (partial match)"]
    return 0.0, ["Different location"]


def _intent_pillar(viewer: ProfileFacts, candidate: ProfileFacts) -> tuple[float, list[str]]:
    a, b = Intent(viewer.intent), Intent(candidate.intent)
    if Intent.ALL in (a, b):
        return PILLAR_WEIGHTS["intent"], ["Open to all connection types"]
    if a == b:
        return PILLAR_WEIGHTS["intent"], [f"Both looking for {a.value.lower()}"]
    if frozenset({a, b}) in _COMPATIBLE_INTENTS:
        return PILLAR_WEIGHTS["intent"] / 2, [f"Compatible intents ({a.value}/{b.value})"]
    return 0.0, [f"Different intents ({a.value}/{b.value})"]


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps come back from SQLite; they are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _recency_pillar(candidate: ProfileFacts, now: datetime) -> tuple[float, list[str]]:
    if candidate.created_at is None:
        return 0.0, ["Profile age unknown"]
    age_days = (_as_utc(now) - _as_utc(candidate.created_at)).total_seconds() / _SECONDS_PER_DAY
    freshness = min(1.0, max(0.0, 1 - age_days / RECENCY_WINDOW_DAYS))
    return freshness * PILLAR_WEIGHTS["recency"], [f"Profile is {max(age_days, 0):.0f} day(s) old"]


# ─────────────────────────────────────────────────────────────────────────────
#  Public API
# ─────────────────────────────────────────────────────────────────────────────

def score_breakdown(
    viewer: ProfileFacts,
    candidate: ProfileFacts,
    now: Optional[datetime] = None,
) -> dict[str, dict[str, Any]]:
    """
    Per-pillar contributions with human-readable reasons.

    Returns
    -------
    {"interests": {"score": 0.2, "max": 0.4, "reasons": [...]}, "location": {...}, ...}
    """
    now = now or datetime.now(timezone.utc)
    pillars = {
        "interests": _interest_pillar(viewer, candidate),
        "location":  _location_pillar(viewer, candidate),
        "intent":    _intent_pillar(viewer, candidate),
        "recency":   _recency_pillar(candidate, now),
    }
    return {
        name: {"score": round(value, 6), "max": PILLAR_WEIGHTS[name], "reasons": reasons}
        for name, (value, reasons) in pillars.items()
    }


def score(
    viewer: ProfileFacts,
    candidate: ProfileFacts,
    now: Optional[datetime] = None,
) -> float:
    """Weighted compatibility of ``candidate`` as seen by ``viewer``, capped at 1.0."""
    now = now or datetime.now(timezone.utc)
    total = (
        _interest_pillar(viewer, candidate)[0]
        + _location_pillar(viewer, candidate)[0]
        + _intent_pillar(viewer, candidate)[0]
        + _recency_pillar(candidate, now)[0]
    )
    return min(1.0, total)
