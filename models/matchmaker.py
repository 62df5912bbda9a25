"""
models/matchmaker.py
════════════════════
MatchmakingEngine — ranks a pool of candidate profiles for one viewer.

Pipeline
────────
  1. Score every candidate against the viewer with models.scorer.score
  2. Drop candidates below the minimum common-interest count (optional)
  3. Sort: Score desc (rounded to 6 places) → Created_At desc (newer first) → User_ID asc
  4. Slice [offset, offset + limit)

Output
──────
  DataFrame with columns:
    Position | User_ID | Score | Common_Interests | Created_At

  ``Position`` indexes back into the candidate sequence that was passed in,
  so callers can recover their own objects without copying them into the frame.

Usage
─────
  engine = MatchmakingEngine(viewer_facts)
  ranked = engine.rank(candidates, min_common_interests=2)
  page   = engine.page(ranked, limit=20, offset=0)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import pandas as pd

from models.scorer import ProfileFacts, common_interests, score

RANK_COLUMNS = ["Position", "User_ID", "Score", "Common_Interests", "Created_At"]

# scores equal to this many places are ties
SCORE_DECIMALS = 6


class MatchmakingEngine:
    """
    Parameters
    ----------
    viewer : facts of the profile doing the discovering
    now    : reference time for the recency pillar (defaults to utcnow)
    """

    def __init__(self, viewer: ProfileFacts, now: Optional[datetime] = None) -> None:
        self.viewer = viewer
        self.now = now or datetime.now(timezone.utc)

    def _row(self, position: int, candidate: Any) -> dict[str, Any]:
        facts = ProfileFacts.from_profile(candidate)
        return {
            "Position":         position,
            "User_ID":          str(candidate.user_id),
            "Score":            score(self.viewer, facts, now=self.now),
            "Common_Interests": len(common_interests(self.viewer.interests, facts.interests)),
            "Created_At":       facts.created_at,
        }

    def rank(
        self,
        candidates: Sequence[Any],
        min_common_interests: Optional[int] = None,
    ) -> pd.DataFrame:
        """Score, filter and sort ``candidates``; returns the full ranked frame."""
        df = pd.DataFrame(
            [self._row(i, c) for i, c in enumerate(candidates)],
            columns=RANK_COLUMNS,
        )
        if df.empty:
            return df

        if min_common_interests and min_common_interests > 0:
            df = df[df["Common_Interests"] >= min_common_interests]

        # rounded key: 0.1 + 0.2 and 0.3 are the same score
        return (
            df.assign(
                Created_At=pd.to_datetime(df["Created_At"], utc=True),
                Score_Key=df["Score"].round(SCORE_DECIMALS),
            )
            .sort_values(
                ["Score_Key", "Created_At", "User_ID"],
                ascending=[False, False, True],
                na_position="last",
                kind="mergesort",
            )
            .drop(columns="Score_Key")
            .reset_index(drop=True)
        )

    @staticmethod
    def page(ranked: pd.DataFrame, limit: int, offset: int) -> pd.DataFrame:
        return ranked.iloc[offset:offset + limit]
