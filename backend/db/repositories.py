"""
backend/db/repositories.py
──────────────────────────
Thin stores over a SQLAlchemy session. One store per table; services receive
them through their constructors.

Stores flush but never commit: the service that owns the unit of work decides
when to commit or roll back.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session, joinedload

from backend.db.models import Like, Match, Profile, User
from models.scorer import Intent


def canonical_pair(first: str, second: str) -> tuple[str, str]:
    """Order two user ids so an unordered pair has exactly one key."""
    return (first, second) if first < second else (second, first)


class UserStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self.session.add(user)
        self.session.flush()
        return user


class ProfileStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_user(self, user_id: str) -> Optional[Profile]:
        return self.session.scalar(select(Profile).where(Profile.user_id == user_id))

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self.session.get(Profile, profile_id)

    def create(self, user_id: str, **fields: Any) -> Profile:
        profile = Profile(user_id=user_id, **fields)
        self.session.add(profile)
        self.session.flush()
        return profile

    def update(self, profile: Profile, **fields: Any) -> Profile:
        for name, value in fields.items():
            setattr(profile, name, value)
        self.session.flush()
        return profile

    def delete(self, profile: Profile) -> None:
        self.session.delete(profile)
        self.session.flush()

    def list_candidates(
        self,
        exclude_user_id: str,
        require_verified: bool = False,
        location: Optional[str] = None,
        looking_for: Optional[Intent] = None,
    ) -> list[Profile]:
        """Profiles of active users other than ``exclude_user_id``, in insertion order."""
        stmt = (
            select(Profile)
            .join(Profile.user)
            .options(joinedload(Profile.user))
            .where(Profile.user_id != exclude_user_id, User.is_active.is_(True))
        )
        if require_verified:
            stmt = stmt.where(User.verified.is_(True))
        if location:
            stmt = stmt.where(Profile.location.icontains(location, autoescape=True))
        if looking_for and looking_for != Intent.ALL:
            stmt = stmt.where(Profile.looking_for.in_([looking_for, Intent.ALL]))
        return list(self.session.scalars(stmt.order_by(Profile.created_at, Profile.profile_id)).unique())

    def newest(self, exclude_user_id: str, limit: int) -> list[Profile]:
        stmt = (
            select(Profile)
            .join(Profile.user)
            .options(joinedload(Profile.user))
            .where(
                Profile.user_id != exclude_user_id,
                User.is_active.is_(True),
                User.verified.is_(True),
            )
            .order_by(Profile.created_at.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt).unique())


class LikeStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, liker_id: str, liked_id: str) -> Optional[Like]:
        return self.session.scalar(
            select(Like).where(Like.liker_id == liker_id, Like.liked_id == liked_id)
        )

    def create(self, liker_id: str, liked_id: str) -> Like:
        like = Like(liker_id=liker_id, liked_id=liked_id)
        self.session.add(like)
        self.session.flush()
        return like

    def delete(self, liker_id: str, liked_id: str) -> int:
        result = self.session.execute(
            delete(Like).where(Like.liker_id == liker_id, Like.liked_id == liked_id)
        )
        return result.rowcount or 0

    def liked_ids(self, liker_id: str) -> set[str]:
        return set(self.session.scalars(select(Like.liked_id).where(Like.liker_id == liker_id)))

    def list_given(self, liker_id: str) -> list[Like]:
        stmt = (
            select(Like)
            .options(joinedload(Like.liked).joinedload(User.profile))
            .where(Like.liker_id == liker_id)
            .order_by(Like.created_at.desc())
        )
        return list(self.session.scalars(stmt).unique())

    def list_received(self, liked_id: str) -> list[Like]:
        stmt = (
            select(Like)
            .options(joinedload(Like.liker).joinedload(User.profile))
            .where(Like.liked_id == liked_id)
            .order_by(Like.created_at.desc())
        )
        return list(self.session.scalars(stmt).unique())


class MatchStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, first: str, second: str) -> Optional[Match]:
        user_a, user_b = canonical_pair(first, second)
        return self.session.scalar(
            select(Match).where(Match.user_a_id == user_a, Match.user_b_id == user_b)
        )

    def create(self, first: str, second: str) -> Match:
        user_a, user_b = canonical_pair(first, second)
        match = Match(user_a_id=user_a, user_b_id=user_b)
        self.session.add(match)
        self.session.flush()
        return match

    def delete(self, match: Match) -> None:
        self.session.delete(match)
        self.session.flush()

    def list_for_user(self, user_id: str, active_only: bool = True) -> list[Match]:
        stmt = (
            select(Match)
            .options(
                joinedload(Match.user_a).joinedload(User.profile),
                joinedload(Match.user_b).joinedload(User.profile),
            )
            .where(or_(Match.user_a_id == user_id, Match.user_b_id == user_id))
            .order_by(Match.matched_at.desc())
        )
        if active_only:
            stmt = stmt.where(Match.is_active.is_(True))
        return list(self.session.scalars(stmt).unique())

    def partner_ids(self, user_id: str, active_only: bool = True) -> set[str]:
        stmt = select(Match.user_a_id, Match.user_b_id).where(
            or_(Match.user_a_id == user_id, Match.user_b_id == user_id)
        )
        if active_only:
            stmt = stmt.where(Match.is_active.is_(True))
        pairs: Iterable[tuple[str, str]] = self.session.execute(stmt).all()
        return {uid for pair in pairs for uid in pair} - {user_id}
