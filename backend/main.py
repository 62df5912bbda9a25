"""
backend/main.py
═══════════════
FastAPI application for the Kindred matchmaking API — profile discovery,
likes and mutual matches.

Endpoints (under settings.api_prefix, default /api/v1)
─────────
  GET    /health                    — Liveness / readiness probe (DB ping)
  GET    /profiles/discover         — Ranked candidate feed for the caller
  GET    /profiles/suggestions      — Newest verified profiles
  POST   /profile/{user_id}/like    — Like; returns is_match / match_id
  DELETE /profile/{user_id}/like    — Unlike (also drops the match)
  GET    /matches                   — Active matches
  GET    /likes?type=given|received — Likes given / received
  POST|PUT|DELETE /profile, GET /profile/me, GET /profile/{user_id}

  Run with:
      uvicorn backend.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.db.base import get_db, get_engine, init_db
from backend.errors import ServiceError
from backend.routers import match, profile
from backend.schemas import ApiResponse, ErrorBody, HealthData, Meta, ok
from config.settings import Settings, get_settings
from utils.logger import logger

_STARTED_AT = time.monotonic()


# ─────────────────────────────────────────────────────────────────────────────
#  Error envelope
# ─────────────────────────────────────────────────────────────────────────────

def error_response(
    status_code: int, code: str, message: str, details: Optional[Any] = None
) -> JSONResponse:
    body = {
        "success": False,
        "error":   ErrorBody(code=code, message=message, details=details).model_dump(),
        "meta":    Meta().model_dump(),
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
        return error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, "VALIDATION_ERROR", "Invalid input data", exc.errors())

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        message = f"Route {request.url.path} not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(exc.status_code, code, message)

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} database error: {exc}")
        return error_response(500, "DATABASE_ERROR", "Database operation failed")

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path} unhandled error")
        message = "Internal server error" if settings.is_production else str(exc)
        return error_response(500, "INTERNAL_ERROR", message)


# ─────────────────────────────────────────────────────────────────────────────
#  Health check
# ─────────────────────────────────────────────────────────────────────────────

def health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Liveness & readiness probe; 503 when the database does not answer."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Health check failed: {exc}")
        return error_response(503, "SERVICE_UNAVAILABLE", "Database connection failed")
    return ok(HealthData(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.monotonic() - _STARTED_AT, 2),
        environment=settings.app_env,
        database="connected",
    ))


# ─────────────────────────────────────────────────────────────────────────────
#  App initialisation
# ─────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def _lifespan(app: FastAPI):
    init_db(get_engine())
    logger.info("Kindred API ready ✓")
    yield


def create_app(settings: Optional[Settings] = None, lifespan=_lifespan) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Kindred — Matchmaking API",
        description="Profile discovery ranked by compatibility, likes and mutual matches.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    app.add_api_route(
        "/health", health_check, methods=["GET"],
        response_model=ApiResponse[HealthData], tags=["Meta"],
    )
    app.include_router(match.router, prefix=settings.api_prefix)
    app.include_router(profile.router, prefix=settings.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("backend.main:app", host=_settings.app_host, port=_settings.app_port, reload=False)
