"""
backend/services/base.py
────────────────────────
Shared plumbing for the services: unit-of-work with retry on transient store
errors, and the dict shapes used for users and profiles in responses.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.db.models import Profile, User
from backend.errors import DataAccessError, ServiceError
from utils.logger import logger

T = TypeVar("T")


class BaseService:
    """
    Parameters
    ----------
    session        : SQLAlchemy session owning the unit of work
    retry_attempts : how many times a transient (OperationalError) failure is tried
    """

    def __init__(self, session: Session, retry_attempts: int = 3) -> None:
        self.session = session
        self.retry_attempts = max(1, retry_attempts)

    def _transaction(self, op: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run ``op`` and commit. Transient store errors roll back and retry;
        service errors roll back and propagate; other store errors become
        DataAccessError.
        """
        for attempt in range(1, self.retry_attempts + 1):
            try:
                result = op(*args, **kwargs)
                self.session.commit()
                return result
            except ServiceError:
                self.session.rollback()
                raise
            except OperationalError as exc:
                self.session.rollback()
                if attempt == self.retry_attempts:
                    logger.error(f"{op.__name__} failed after {attempt} attempt(s): {exc}")
                    raise DataAccessError("Database operation failed") from exc
                logger.warning(f"{op.__name__}: transient database error, retrying ({attempt}/{self.retry_attempts})")
            except SQLAlchemyError as exc:
                self.session.rollback()
                logger.error(f"{op.__name__} failed: {exc}")
                raise DataAccessError("Database operation failed") from exc
        raise AssertionError("unreachable")

    def _read(self, op: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return op(*args, **kwargs)
        except ServiceError:
            raise
        except SQLAlchemyError as exc:
            logger.error(f"{op.__name__} failed: {exc}")
            raise DataAccessError("Database operation failed") from exc


# ─────────────────────────────────────────────────────────────────────────────
#  Response shapes
# ─────────────────────────────────────────────────────────────────────────────

def user_summary(user: User) -> dict[str, Any]:
    return {
        "user_id":      user.user_id,
        "first_name":   user.first_name,
        "last_name":    user.last_name,
        "phone_number": user.phone_number,
        "verified":     user.verified,
        "created_at":   user.created_at,
    }


def profile_payload(profile: Optional[Profile], with_user: bool = True) -> Optional[dict[str, Any]]:
    if profile is None:
        return None
    payload: dict[str, Any] = {
        "profile_id":    profile.profile_id,
        "user_id":       profile.user_id,
        "bio":           profile.bio,
        "interests":     list(profile.interests or []),
        "location":      profile.location,
        "looking_for":   profile.looking_for,
        "voice_bio_url": profile.voice_bio_url,
        "created_at":    profile.created_at,
        "updated_at":    profile.updated_at,
    }
    if with_user:
        payload["user"] = user_summary(profile.user)
    return payload
