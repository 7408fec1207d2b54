"""
backend/routers/profile.py
──────────────────────────
Profile endpoints for the authenticated student.

Endpoints
─────────
GET  /profile   — Current profile
PUT  /profile   — Partial update (omitted fields are kept)
"""

from fastapi import APIRouter, Depends

from backend.dependencies import get_current_profile_id, get_profile_service
from backend.schemas import ErrorResponse, ProfileOut, ProfileUpdateRequest
from backend.services import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])

_AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Email OTP token is missing or invalid"},
    404: {"model": ErrorResponse, "description": "No profile for the verified email"},
}


@router.get("", response_model=ProfileOut, summary="Get the current user profile", responses=_AUTH_ERRORS)
def get_profile(
    profile_id: str = Depends(get_current_profile_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOut:
    return ProfileOut.from_profile(service.get_profile(profile_id))


@router.put("", response_model=ProfileOut, summary="Update the current user profile", responses=_AUTH_ERRORS)
def update_profile(
    body: ProfileUpdateRequest,
    profile_id: str = Depends(get_current_profile_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOut:
    """Persists profile fields to improve match quality."""
    updated = service.update_profile(profile_id, body.changes())
    return ProfileOut.from_profile(updated)
