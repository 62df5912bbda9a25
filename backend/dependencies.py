"""
backend/dependencies.py
───────────────────────
Per-request service factories. Each service is built around the request's
session so tests can swap ``get_db`` / ``get_settings`` through
``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.db.base import get_db
from backend.services.discovery import DiscoveryService
from backend.services.matching import MatchService
from backend.services.profiles import ProfileService
from config.settings import Settings, get_settings


def get_discovery_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DiscoveryService:
    return DiscoveryService(
        db,
        require_verified=settings.require_verified_profiles,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )


def get_match_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> MatchService:
    return MatchService(db, retry_attempts=settings.db_retry_attempts)


def get_profile_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ProfileService:
    return ProfileService(db, retry_attempts=settings.db_retry_attempts)
