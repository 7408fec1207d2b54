"""
backend/schemas.py
──────────────────
Pydantic v2 request / response models for all FastAPI endpoints.

JSON bodies use camelCase (``deliveryHint``, ``nextOffset`` …); the Python
side keeps snake_case and accepts either on input.

Sections
────────
  1. Email OTP models          — OtpRequest, OtpRequestResponse, OtpVerifyRequest, OtpVerifyResponse
  2. Match models              — CandidateOut, MatchCandidatesResponse
  3. Profile models            — ProfileOut, ProfileUpdateRequest
  4. Catalog models            — UniversityOut, UniversityCatalogResponse
  5. Shared / util models      — HealthResponse, ErrorResponse
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from models.profile import Candidate, Profile, University


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# list items must be non-empty strings
Tag = Annotated[str, Field(min_length=1)]


# ─────────────────────────────────────────────────────────────────────────────
#  1. Email OTP models
# ─────────────────────────────────────────────────────────────────────────────

class OtpRequest(ApiModel):
    """Body schema for POST /auth/email/request."""
    email: EmailStr = Field(..., examples=["student@u-tokyo.ac.jp"])


class OtpRequestResponse(ApiModel):
    delivery_hint:      str = Field(..., examples=["st***@u-tokyo.ac.jp"])
    expires_in_seconds: int = Field(..., gt=0, examples=[600])
    domain:             str = Field(..., examples=["u-tokyo.ac.jp"])


class OtpVerifyRequest(ApiModel):
    """Body schema for POST /auth/email/verify."""
    email: EmailStr = Field(..., examples=["student@u-tokyo.ac.jp"])
    code:  str      = Field(..., min_length=6, max_length=6, examples=["123456"])


class OtpVerifyResponse(ApiModel):
    token:           str
    verified_email:  str
    verified_domain: str
    verified_at:     datetime


# ─────────────────────────────────────────────────────────────────────────────
#  2. Match models
# ─────────────────────────────────────────────────────────────────────────────

class CandidateOut(ApiModel):
    """Candidate suggested for matching."""
    id:               str
    name:             str
    university_id:    str
    match_score:      float = Field(..., ge=0.0, le=1.0, description="Compatibility between 0 and 1")
    shared_interests: list[str] = Field(default_factory=list)
    introduction:     Optional[str] = None

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateOut":
        return cls(**candidate.to_dict())


class MatchCandidatesResponse(ApiModel):
    results:     list[CandidateOut]
    next_offset: Optional[int] = Field(None, examples=[10])


# ─────────────────────────────────────────────────────────────────────────────
#  3. Profile models
# ─────────────────────────────────────────────────────────────────────────────

class ProfileOut(ApiModel):
    id:                  str
    name:                str
    university_id:       str
    majors:              list[str]
    interests:           list[str]
    languages:           list[str]
    bio:                 Optional[str] = None
    preferred_locations: list[str]

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileOut":
        return cls(**profile.to_dict())


class ProfileUpdateRequest(ApiModel):
    """Editable fields for the current user's profile. Omitted fields are kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name:                Optional[str] = Field(None, min_length=1)
    university_id:       Optional[str] = None
    majors:              Optional[list[Tag]] = None
    interests:           Optional[list[Tag]] = None
    languages:           Optional[list[Tag]] = None
    bio:                 Optional[str] = None
    preferred_locations: Optional[list[Tag]] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ─────────────────────────────────────────────────────────────────────────────
#  4. Catalog models
# ─────────────────────────────────────────────────────────────────────────────

class UniversityOut(ApiModel):
    id:                 str
    name:               str
    city:               str
    region:             str
    country:            str
    tags:               list[str]
    programs:           list[str]
    verification_level: Literal["basic", "strict"]
    website:            Optional[str] = None

    @classmethod
    def from_university(cls, university: University) -> "UniversityOut":
        return cls(**university.to_dict())


class UniversityCatalogResponse(ApiModel):
    total:   int = Field(..., ge=0)
    results: list[UniversityOut]


# ─────────────────────────────────────────────────────────────────────────────
#  5. Shared / utility models
# ─────────────────────────────────────────────────────────────────────────────

class HealthResponse(ApiModel):
    """Response for GET /healthz."""
    status:              str
    profiles_loaded:     int
    universities_loaded: int
    version:             str = "0.1.0"


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response."""
    error:   str
    message: str
    details: Optional[dict[str, Any]] = None
