"""
backend/errors.py
─────────────────
Service-level error taxonomy. Services raise these; backend.main turns them
into the JSON error envelope.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base for every error a service surfaces deliberately."""

    status_code = 400
    default_code = "SERVICE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details


class NotFoundError(ServiceError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    status_code = 409
    default_code = "CONFLICT"


class InvalidActionError(ServiceError):
    status_code = 400
    default_code = "INVALID_ACTION"


class DataAccessError(ServiceError):
    status_code = 500
    default_code = "DATABASE_ERROR"


class AuthError(ServiceError):
    status_code = 401
    default_code = "UNAUTHORIZED"
