"""
backend/schemas.py
──────────────────
Pydantic v2 request / response models for all FastAPI endpoints.

Sections
────────
  1. Envelope                  — ApiResponse, ErrorBody, Meta
  2. Profile models            — ProfileCreate, ProfileUpdate, ProfileOut
  3. Discovery models          — DiscoveredProfile, PillarScore, Pagination, DiscoverData
  4. Like / match models       — LikeData, MatchOut, LikeEntry, LikesData
  5. Shared / util models      — HealthData, MessageData
"""

from datetime import datetime, timezone
from typing import Any, Generic, Literal, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from models.scorer import Intent

T = TypeVar("T")


# ─────────────────────────────────────────────────────────────────────────────
#  1. Envelope
# ─────────────────────────────────────────────────────────────────────────────

class Meta(BaseModel):
    timestamp:  datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str = Field(default_factory=lambda: str(uuid4()))


class ErrorBody(BaseModel):
    code:    str
    message: str
    details: Optional[Any] = None


class ApiResponse(BaseModel, Generic[T]):
    """Every response is wrapped: {success, data | error, meta}."""
    success: bool = True
    data:    Optional[T] = None
    error:   Optional[ErrorBody] = None
    meta:    Meta = Field(default_factory=Meta)


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "meta": Meta()}


# ─────────────────────────────────────────────────────────────────────────────
#  2. Profile models
# ─────────────────────────────────────────────────────────────────────────────

class _ProfileFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("bio", "location", "voice_bio_url", mode="before", check_fields=False)
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("interests", check_fields=False)
    @classmethod
    def _check_interests(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return value
        for tag in value:
            if not 1 <= len(tag) <= 50:
                raise ValueError("Each interest must be 1-50 characters")
        return value


class ProfileCreate(_ProfileFields):
    """Body for POST /profile."""
    bio:           Optional[str] = Field(None, max_length=500)
    interests:     list[str] = Field(default_factory=list, max_length=20)
    location:      Optional[str] = Field(None, max_length=255)
    looking_for:   Intent = Field(Intent.ALL, alias="lookingFor")
    voice_bio_url: Optional[HttpUrl] = Field(None, alias="voiceBioUrl")

    def to_fields(self) -> dict[str, Any]:
        data = self.model_dump()
        if data["voice_bio_url"] is not None:
            data["voice_bio_url"] = str(data["voice_bio_url"])
        return data


class ProfileUpdate(_ProfileFields):
    """Body for PUT /profile — only fields that are sent get changed."""
    bio:           Optional[str] = Field(None, max_length=500)
    interests:     Optional[list[str]] = Field(None, max_length=20)
    location:      Optional[str] = Field(None, max_length=255)
    looking_for:   Optional[Intent] = Field(None, alias="lookingFor")
    voice_bio_url: Optional[HttpUrl] = Field(None, alias="voiceBioUrl")

    def to_changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_unset=True)
        if changes.get("voice_bio_url") is not None:
            changes["voice_bio_url"] = str(changes["voice_bio_url"])
        return changes


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id:      str
    first_name:   str
    last_name:    str
    phone_number: str
    verified:     bool
    created_at:   Optional[datetime] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    profile_id:    str
    user_id:       str
    bio:           Optional[str] = None
    interests:     list[str] = Field(default_factory=list)
    location:      Optional[str] = None
    looking_for:   Intent
    voice_bio_url: Optional[str] = None
    created_at:    datetime
    updated_at:    datetime
    user:          Optional[UserSummary] = None


# ─────────────────────────────────────────────────────────────────────────────
#  3. Discovery models
# ─────────────────────────────────────────────────────────────────────────────

class PillarScore(BaseModel):
    score:   float
    max:     float
    reasons: list[str] = Field(default_factory=list)


class DiscoveredProfile(ProfileOut):
    match_score: float = Field(..., ge=0.0, le=1.0, description="Compatibility score (0–1)")
    breakdown:   Optional[dict[str, PillarScore]] = Field(
        None, description="Per-pillar contributions: interests, location, intent, recency"
    )


class Pagination(BaseModel):
    total:        int
    limit:        int
    offset:       int
    total_pages:  int
    current_page: int
    has_more:     bool
    has_previous: bool


class DiscoverData(BaseModel):
    items:      list[DiscoveredProfile]
    pagination: Pagination


class SuggestionsData(BaseModel):
    items: list[DiscoveredProfile]


# ─────────────────────────────────────────────────────────────────────────────
#  4. Like / match models
# ─────────────────────────────────────────────────────────────────────────────

class LikeData(BaseModel):
    is_match: bool
    match_id: Optional[str] = None
    message:  str


class MatchOut(BaseModel):
    match_id:   str
    matched_at: datetime
    is_active:  bool
    other_user: UserSummary
    profile:    Optional[ProfileOut] = None


class MatchesData(BaseModel):
    matches: list[MatchOut]


class LikeEntry(BaseModel):
    like_id:    str
    created_at: datetime
    user:       UserSummary
    profile:    Optional[ProfileOut] = None


class LikesData(BaseModel):
    likes: list[LikeEntry]
    type:  Literal["given", "received"]


# ─────────────────────────────────────────────────────────────────────────────
#  5. Shared / utility models
# ─────────────────────────────────────────────────────────────────────────────

class MessageData(BaseModel):
    message: str


class HealthData(BaseModel):
    """Payload for GET /health."""
    status:      str
    timestamp:   datetime
    uptime:      float
    environment: str
    database:    str
    version:     str = "1.0.0"
