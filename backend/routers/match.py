"""
backend/routers/match.py
────────────────────────
FastAPI router for matchmaking endpoints.

Endpoints
─────────
GET  /matches/candidates   — Ranked candidates for the authenticated student

Page size bounds come from settings (DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT), which
also size the engine.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_current_profile_id, get_matching_service
from backend.schemas import CandidateOut, ErrorResponse, MatchCandidatesResponse
from backend.services import MatchingService
from config.settings import Settings, get_settings
from models.matchmaker import MIN_PAGE_LIMIT

router = APIRouter(prefix="/matches", tags=["Matches"])

_settings = get_settings()


@router.get(
    "/candidates",
    response_model=MatchCandidatesResponse,
    summary="Fetch recommended match candidates for the authenticated user",
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid email OTP authentication"},
        404: {"model": ErrorResponse, "description": "No profile for the verified email"},
    },
)
def get_candidates(
    limit: Optional[int] = Query(
        None,
        ge=MIN_PAGE_LIMIT,
        le=_settings.max_page_limit,
        description=f"Number of candidates to retrieve (default {_settings.default_page_limit})",
    ),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    preset: Optional[str] = Query(None, description="Weight preset id from /catalog/configuration"),
    profile_id: str = Depends(get_current_profile_id),
    service: MatchingService = Depends(get_matching_service),
    settings: Settings = Depends(get_settings),
) -> MatchCandidatesResponse:
    """
    Returns candidates ranked by profile overlap with the caller:

    | Dimension | Default weight |
    |-----------|----------------|
    | Interests | 0.5 |
    | Majors    | 0.3 |
    | Languages | 0.2 |

    Each overlap is measured against the candidate's own set size. Pass
    `nextOffset` back as `offset` to continue; `null` means the end.
    """
    if limit is None:
        limit = settings.default_page_limit
    page = service.rank_candidates(profile_id, offset=offset, limit=limit, preset_id=preset)
    return MatchCandidatesResponse(
        results=[CandidateOut.from_candidate(c) for c in page.results],
        next_offset=page.next_offset,
    )
