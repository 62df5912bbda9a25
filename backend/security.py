"""
backend/security.py
───────────────────
Bearer-token verification. Tokens are issued elsewhere; here we only check
the signature and that the ``userId`` claim names an existing, active user.
"""

from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.db.base import get_db
from backend.db.repositories import UserStore
from backend.errors import AuthError
from config.settings import Settings, get_settings
from utils.logger import logger

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    phone_number: str
    verified: bool


def decode_token(token: str, settings: Settings) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid or expired token") from exc


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("No token provided")

    claims = decode_token(credentials.credentials, settings)
    user_id = claims.get("userId")
    if not user_id:
        raise AuthError("Invalid or expired token")

    user = UserStore(db).get(str(user_id))
    if user is None or not user.is_active:
        logger.warning(f"Rejected token for missing/inactive user {user_id}")
        raise AuthError("User not found or inactive")

    return CurrentUser(user_id=user.user_id, phone_number=user.phone_number, verified=user.verified)
