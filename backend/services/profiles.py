"""
backend/services/profiles.py
────────────────────────────
Profile CRUD. One profile per user; deleting a user deletes the profile.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.db.models import Profile
from backend.db.repositories import ProfileStore, UserStore
from backend.errors import ConflictError, NotFoundError
from backend.services.base import BaseService
from models.scorer import Intent
from utils.logger import logger


class ProfileService(BaseService):
    def __init__(
        self,
        session: Session,
        users: Optional[UserStore] = None,
        profiles: Optional[ProfileStore] = None,
        retry_attempts: int = 3,
    ) -> None:
        super().__init__(session, retry_attempts=retry_attempts)
        self.users = users or UserStore(session)
        self.profiles = profiles or ProfileStore(session)

    def create_profile(self, user_id: str, data: dict[str, Any]) -> Profile:
        return self._transaction(self._create, user_id, data)

    def _create(self, user_id: str, data: dict[str, Any]) -> Profile:
        if self.users.get(user_id) is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        if self.profiles.get_by_user(user_id) is not None:
            raise ConflictError("Profile already exists for this user", code="PROFILE_EXISTS")

        try:
            with self.session.begin_nested():
                profile = self.profiles.create(
                    user_id,
                    bio=data.get("bio"),
                    interests=list(data.get("interests") or []),
                    location=data.get("location"),
                    looking_for=Intent(data.get("looking_for") or Intent.ALL),
                    voice_bio_url=data.get("voice_bio_url"),
                )
        except IntegrityError as exc:
            raise ConflictError("Profile already exists for this user", code="PROFILE_EXISTS") from exc

        logger.info(f"Profile created for user {user_id}")
        return profile

    def get_profile(self, user_id: str) -> Profile:
        profile = self._read(self.profiles.get_by_user, user_id)
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")
        return profile

    def get_profile_by_id(self, profile_id: str) -> Profile:
        profile = self._read(self.profiles.get_by_id, profile_id)
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")
        return profile

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> Profile:
        """Apply only the fields present in ``changes``."""
        return self._transaction(self._update, user_id, changes)

    def _update(self, user_id: str, changes: dict[str, Any]) -> Profile:
        profile = self.profiles.get_by_user(user_id)
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")
        changes = dict(changes)
        # looking_for is NOT NULL; an explicit null leaves it unchanged
        if changes.get("looking_for") is None:
            changes.pop("looking_for", None)
        else:
            changes["looking_for"] = Intent(changes["looking_for"])
        if "interests" in changes:
            changes["interests"] = list(changes["interests"] or [])
        self.profiles.update(profile, **changes)
        logger.info(f"Profile updated for user {user_id}: {sorted(changes)}")
        return profile

    def delete_profile(self, user_id: str) -> None:
        self._transaction(self._delete, user_id)

    def _delete(self, user_id: str) -> None:
        profile = self.profiles.get_by_user(user_id)
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")
        self.profiles.delete(profile)
        logger.info(f"Profile deleted for user {user_id}")

    def has_profile(self, user_id: str) -> bool:
        return self._read(self.profiles.get_by_user, user_id) is not None
