"""
backend/routers/match.py
────────────────────────
FastAPI router for discovery and like / match endpoints.

Endpoints
─────────
GET    /profiles/discover        — Ranked candidate profiles for the caller
GET    /profiles/suggestions     — Newest verified profiles, unranked
POST   /profile/{user_id}/like   — Like a profile; reports whether it's a match
DELETE /profile/{user_id}/like   — Remove a like (and the match, if any)
GET    /matches                  — Caller's active matches
GET    /likes?type=given|received
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_discovery_service, get_match_service
from backend.schemas import (
    ApiResponse,
    DiscoverData,
    LikeData,
    LikesData,
    MatchesData,
    MessageData,
    SuggestionsData,
    ok,
)
from backend.security import CurrentUser, get_current_user
from backend.services.discovery import DiscoveryFilters, DiscoveryService
from backend.services.matching import MatchService
from models.scorer import Intent

router = APIRouter(tags=["matchmaking"])


@router.get("/profiles/discover", response_model=ApiResponse[DiscoverData])
def discover_profiles(
    limit: Optional[int] = Query(None, description="Page size; 0 or absent uses the default"),
    offset: Optional[int] = Query(None, ge=0),
    location: Optional[str] = Query(None, max_length=255),
    looking_for: Optional[Intent] = Query(None, alias="lookingFor"),
    min_interests: Optional[int] = Query(None, ge=0, alias="minInterests",
                                         description="Minimum number of common interests"),
    user: CurrentUser = Depends(get_current_user),
    service: DiscoveryService = Depends(get_discovery_service),
):
    filters = DiscoveryFilters(
        location=location,
        looking_for=looking_for,
        min_common_interests=min_interests,
    )
    result = service.discover_profiles(user.user_id, filters, limit=limit, offset=offset)
    return ok(result)


@router.get("/profiles/suggestions", response_model=ApiResponse[SuggestionsData])
def random_suggestions(
    limit: int = Query(20, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    service: DiscoveryService = Depends(get_discovery_service),
):
    return ok({"items": service.random_suggestions(user.user_id, limit=limit)})


@router.post("/profile/{user_id}/like", response_model=ApiResponse[LikeData])
def like_profile(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    result = service.like_profile(user.user_id, user_id)
    message = "It's a match!" if result.is_match else "Like recorded"
    return ok({"is_match": result.is_match, "match_id": result.match_id, "message": message})


@router.delete("/profile/{user_id}/like", response_model=ApiResponse[MessageData])
def unlike_profile(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    service.unlike_profile(user.user_id, user_id)
    return ok({"message": "Like removed successfully"})


@router.get("/matches", response_model=ApiResponse[MatchesData])
def list_matches(
    user: CurrentUser = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    return ok({"matches": service.get_matches(user.user_id)})


@router.get("/likes", response_model=ApiResponse[LikesData])
def list_likes(
    type: Literal["given", "received"] = Query("given"),
    user: CurrentUser = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    if type == "received":
        likes = service.get_likes_received(user.user_id)
    else:
        likes = service.get_likes_given(user.user_id)
    return ok({"likes": likes, "type": type})
