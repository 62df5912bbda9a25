"""
backend/services/discovery.py
─────────────────────────────
Ranked candidate feed for a viewer.

  viewer profile ─┐
  candidate pool ─┼─► exclude liked / matched ─► MatchmakingEngine.rank ─► page
  likes, matches ─┘

Read-only: nothing here writes to the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from backend.db.repositories import LikeStore, MatchStore, ProfileStore
from backend.errors import NotFoundError
from backend.services.base import BaseService, profile_payload
from models.matchmaker import MatchmakingEngine
from models.scorer import Intent, ProfileFacts, score_breakdown
from utils.logger import logger
from utils.pagination import normalize_pagination, pagination_metadata

RANDOM_SUGGESTION_SCORE = 0.5


@dataclass(frozen=True)
class DiscoveryFilters:
    location: Optional[str] = None
    looking_for: Optional[Intent] = None
    min_common_interests: Optional[int] = None


class DiscoveryService(BaseService):
    """
    Parameters
    ----------
    session          : SQLAlchemy session (reads only)
    require_verified : only surface verified users (production policy)
    default_limit    : page size when none is given
    max_limit        : upper clamp for page size
    """

    def __init__(
        self,
        session: Session,
        profiles: Optional[ProfileStore] = None,
        likes: Optional[LikeStore] = None,
        matches: Optional[MatchStore] = None,
        require_verified: bool = False,
        default_limit: int = 20,
        max_limit: int = 100,
    ) -> None:
        super().__init__(session)
        self.profiles = profiles or ProfileStore(session)
        self.likes = likes or LikeStore(session)
        self.matches = matches or MatchStore(session)
        self.require_verified = require_verified
        self.default_limit = default_limit
        self.max_limit = max_limit

    def discover_profiles(
        self,
        viewer_id: str,
        filters: Optional[DiscoveryFilters] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """
        Returns
        -------
        {"items": [profile payload + "match_score" + "breakdown"], "pagination": {...}}

        Raises NotFoundError(PROFILE_NOT_FOUND) if the viewer has no profile.
        """
        filters = filters or DiscoveryFilters()
        limit, offset = normalize_pagination(
            limit, offset, default_limit=self.default_limit, max_limit=self.max_limit
        )
        return self._read(self._discover, viewer_id, filters, limit, offset, now)

    def _discover(
        self,
        viewer_id: str,
        filters: DiscoveryFilters,
        limit: int,
        offset: int,
        now: Optional[datetime],
    ) -> dict[str, Any]:
        viewer = self.profiles.get_by_user(viewer_id)
        if viewer is None:
            raise NotFoundError(
                "Profile not found. Please create a profile first.", code="PROFILE_NOT_FOUND"
            )

        pool = self.profiles.list_candidates(
            exclude_user_id=viewer_id,
            require_verified=self.require_verified,
            location=filters.location,
            looking_for=filters.looking_for,
        )
        excluded = self.likes.liked_ids(viewer_id) | self.matches.partner_ids(viewer_id)
        excluded.add(viewer_id)
        candidates = [p for p in pool if p.user_id not in excluded]

        viewer_facts = ProfileFacts.from_profile(viewer)
        engine = MatchmakingEngine(viewer_facts, now=now)
        ranked = engine.rank(candidates, min_common_interests=filters.min_common_interests)
        page = engine.page(ranked, limit=limit, offset=offset)

        items = []
        for row in page.itertuples(index=False):
            candidate = candidates[row.Position]
            payload = profile_payload(candidate)
            payload["match_score"] = round(float(row.Score), 4)
            payload["breakdown"] = score_breakdown(
                viewer_facts, ProfileFacts.from_profile(candidate), now=engine.now
            )
            items.append(payload)

        total = len(ranked)
        logger.info(
            f"Profiles discovered for {viewer_id}: pool={len(pool)} total={total} "
            f"returned={len(items)} limit={limit} offset={offset}"
        )
        return {"items": items, "pagination": pagination_metadata(total, limit, offset)}

    def random_suggestions(self, viewer_id: str, limit: int = 20) -> list[dict[str, Any]]:
        """Newest verified, active profiles with a flat score; no ranking."""
        limit, _ = normalize_pagination(limit, 0, default_limit=self.default_limit, max_limit=self.max_limit)
        profiles = self._read(self.profiles.newest, viewer_id, limit)
        suggestions = []
        for profile in profiles:
            payload = profile_payload(profile)
            payload["match_score"] = RANDOM_SUGGESTION_SCORE
            suggestions.append(payload)
        return suggestions
