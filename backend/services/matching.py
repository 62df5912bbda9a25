"""
backend/services/matching.py
────────────────────────────
Like → mutual like → match.

A like is a directed edge. When the reverse edge already exists the pair
becomes a match, stored once under its canonical (min, max) ordering. The
match insert runs in a SAVEPOINT so that losing a race against the other
user's like (unique violation on the pair) resolves to "already matched".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.db.models import Match
from backend.db.repositories import LikeStore, MatchStore, ProfileStore, canonical_pair
from backend.errors import ConflictError, InvalidActionError, NotFoundError
from backend.services.base import BaseService, profile_payload, user_summary
from utils.logger import logger


@dataclass(frozen=True)
class LikeResult:
    is_match: bool
    match_id: Optional[str] = None


class MatchService(BaseService):
    def __init__(
        self,
        session: Session,
        profiles: Optional[ProfileStore] = None,
        likes: Optional[LikeStore] = None,
        matches: Optional[MatchStore] = None,
        retry_attempts: int = 3,
    ) -> None:
        super().__init__(session, retry_attempts=retry_attempts)
        self.profiles = profiles or ProfileStore(session)
        self.likes = likes or LikeStore(session)
        self.matches = matches or MatchStore(session)

    # ── like / unlike ─────────────────────────────────────────────────────────

    def like_profile(self, liker_id: str, liked_id: str) -> LikeResult:
        """Record ``liker_id`` → ``liked_id``; returns whether it completed a match."""
        if liker_id == liked_id:
            raise InvalidActionError("Cannot like your own profile")
        return self._transaction(self._like, liker_id, liked_id)

    def _like(self, liker_id: str, liked_id: str) -> LikeResult:
        if self.likes.get(liker_id, liked_id) is not None:
            raise ConflictError("Profile already liked", code="ALREADY_LIKED")
        if self.profiles.get_by_user(liker_id) is None:
            raise NotFoundError("Your profile not found", code="PROFILE_NOT_FOUND")
        if self.profiles.get_by_user(liked_id) is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")

        try:
            with self.session.begin_nested():
                self.likes.create(liker_id, liked_id)
        except IntegrityError as exc:
            # unique pair lost to a concurrent like, or a profile vanished under us
            if self.likes.get(liker_id, liked_id) is not None:
                raise ConflictError("Profile already liked", code="ALREADY_LIKED") from exc
            if self.profiles.get_by_user(liked_id) is None:
                raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND") from exc
            if self.profiles.get_by_user(liker_id) is None:
                raise NotFoundError("Your profile not found", code="PROFILE_NOT_FOUND") from exc
            raise

        if self.likes.get(liked_id, liker_id) is None:
            logger.info(f"Like created from {liker_id} to {liked_id}")
            return LikeResult(is_match=False)

        match = self._ensure_match(liker_id, liked_id)
        logger.info(f"Match {match.match_id} between {liker_id} and {liked_id}")
        return LikeResult(is_match=True, match_id=match.match_id)

    def _ensure_match(self, first: str, second: str) -> Match:
        match = self.matches.get(first, second)
        if match is None:
            try:
                with self.session.begin_nested():
                    return self.matches.create(first, second)
            except IntegrityError:
                logger.info(f"Match for {canonical_pair(first, second)} already created concurrently")
                match = self.matches.get(first, second)
                if match is None:
                    raise
        if not match.is_active:
            match.is_active = True
            match.matched_at = datetime.now(timezone.utc)
            self.session.flush()
        return match

    def unlike_profile(self, liker_id: str, liked_id: str) -> None:
        """Remove the like, and the match for the pair if there is one."""
        self._transaction(self._unlike, liker_id, liked_id)

    def _unlike(self, liker_id: str, liked_id: str) -> None:
        if self.likes.get(liker_id, liked_id) is None:
            raise NotFoundError("Like not found", code="LIKE_NOT_FOUND")
        self.likes.delete(liker_id, liked_id)

        match = self.matches.get(liker_id, liked_id)
        if match is not None:
            self.matches.delete(match)
            logger.info(f"Match removed between {liker_id} and {liked_id}")
        logger.info(f"Like removed from {liker_id} to {liked_id}")

    # ── listings ──────────────────────────────────────────────────────────────

    def get_matches(self, user_id: str) -> list[dict[str, Any]]:
        """Active matches for ``user_id``, newest first, seen from their side."""
        def _load() -> list[dict[str, Any]]:
            result = []
            for match in self.matches.list_for_user(user_id, active_only=True):
                other = match.other_user(user_id)
                result.append({
                    "match_id":   match.match_id,
                    "matched_at": match.matched_at,
                    "is_active":  match.is_active,
                    "other_user": user_summary(other),
                    "profile":    profile_payload(other.profile, with_user=False),
                })
            return result
        return self._read(_load)

    def get_likes_given(self, user_id: str) -> list[dict[str, Any]]:
        return self._read(
            lambda: [self._like_entry(like.like_id, like.created_at, like.liked)
                     for like in self.likes.list_given(user_id)]
        )

    def get_likes_received(self, user_id: str) -> list[dict[str, Any]]:
        return self._read(
            lambda: [self._like_entry(like.like_id, like.created_at, like.liker)
                     for like in self.likes.list_received(user_id)]
        )

    @staticmethod
    def _like_entry(like_id: str, created_at: datetime, user: Any) -> dict[str, Any]:
        return {
            "like_id":    like_id,
            "created_at": created_at,
            "user":       user_summary(user),
            "profile":    profile_payload(user.profile, with_user=False),
        }

    def has_liked(self, liker_id: str, liked_id: str) -> bool:
        return self._read(lambda: self.likes.get(liker_id, liked_id) is not None)

    def are_matched(self, first: str, second: str) -> bool:
        match = self._read(self.matches.get, first, second)
        return match is not None and match.is_active
