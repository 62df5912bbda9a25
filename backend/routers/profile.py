"""
backend/routers/profile.py
──────────────────────────
Profile CRUD for the authenticated user.

Endpoints
─────────
POST   /profile              — Create the caller's profile
GET    /profile/me           — Caller's profile
GET    /profile/{user_id}    — Someone's profile
PUT    /profile              — Partial update of the caller's profile
DELETE /profile              — Delete the caller's profile
"""

from fastapi import APIRouter, Depends, status

from backend.dependencies import get_profile_service
from backend.schemas import ApiResponse, MessageData, ProfileCreate, ProfileOut, ProfileUpdate, ok
from backend.security import CurrentUser, get_current_user
from backend.services.base import profile_payload
from backend.services.profiles import ProfileService

router = APIRouter(prefix="/profile", tags=["profiles"])


@router.post("", response_model=ApiResponse[ProfileOut], status_code=status.HTTP_201_CREATED)
def create_profile(
    body: ProfileCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    profile = service.create_profile(user.user_id, body.to_fields())
    return ok(profile_payload(profile))


@router.get("/me", response_model=ApiResponse[ProfileOut])
def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return ok(profile_payload(service.get_profile(user.user_id)))


@router.get("/{user_id}", response_model=ApiResponse[ProfileOut])
def get_profile(
    user_id: str,
    _: CurrentUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return ok(profile_payload(service.get_profile(user_id)))


@router.put("", response_model=ApiResponse[ProfileOut])
def update_profile(
    body: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    profile = service.update_profile(user.user_id, body.to_changes())
    return ok(profile_payload(profile))


@router.delete("", response_model=ApiResponse[MessageData])
def delete_profile(
    user: CurrentUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    service.delete_profile(user.user_id)
    return ok({"message": "Profile deleted successfully"})
