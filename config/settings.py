"""
config/settings.py
──────────────────
Centralised settings loaded from .env via pydantic-settings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./kindred.db"
    db_echo: bool = False
    db_retry_attempts: int = Field(3, ge=1, le=10)

    # Auth (token verification only)
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"

    # Discovery
    # None = derive from app_env (verified-only in production)
    discovery_require_verified: Optional[bool] = None
    default_page_limit: int = 20
    max_page_limit: int = 100

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = Path("./logs/kindred.log")

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def require_verified_profiles(self) -> bool:
        if self.discovery_require_verified is None:
            return self.is_production
        return self.discovery_require_verified

    @model_validator(mode="after")
    def _check_production_secrets(self) -> "Settings":
        if self.is_production:
            missing = [
                name for name, value in (
                    ("JWT_SECRET", self.jwt_secret),
                    ("DATABASE_URL", self.database_url),
                )
                if not value or value == "dev-secret-change-me"
            ]
            if missing:
                raise ValueError(
                    f"Missing required environment variable(s): {', '.join(missing)}"
                )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
