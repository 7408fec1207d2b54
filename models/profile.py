"""
models/profile.py
─────────────────
Value types shared by the matchmaking engine and the stores.

  Profile          — a student profile (read-only to the engine)
  Candidate        — one ranked match, built fresh per request
  RankedPage       — a page of candidates + continuation offset
  ScoringWeights   — validated (interests, majors, languages) weight triple
  University       — catalog entry
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterable, Literal, Optional

from models.errors import ValidationError


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    """De-duplicate while keeping first-seen order."""
    return tuple(dict.fromkeys(values))


# ─────────────────────────────────────────────────────────────────────────────
#  Profile
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    university_id: str
    majors: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    bio: Optional[str] = None
    preferred_locations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Set semantics: duplicates inside one profile carry no weight.
        for name in ("majors", "interests", "languages", "preferred_locations"):
            object.__setattr__(self, name, _unique(getattr(self, name)))

    def merged(self, **changes: Any) -> "Profile":
        """Return a copy with the non-None ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("majors", "interests", "languages", "preferred_locations"):
            data[key] = list(data[key])
        return data


# ─────────────────────────────────────────────────────────────────────────────
#  Candidate / page
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    university_id: str
    match_score: float
    shared_interests: list[str] = field(default_factory=list)
    introduction: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RankedPage:
    results: list[Candidate]
    next_offset: Optional[int]
    total: int


# ─────────────────────────────────────────────────────────────────────────────
#  Scoring weights
# ─────────────────────────────────────────────────────────────────────────────

_WEIGHT_SUM_TOLERANCE = 1e-6


@dataclass(frozen=True)
class ScoringWeights:
    interests: float
    majors: float
    languages: float

    def __post_init__(self) -> None:
        values = (self.interests, self.majors, self.languages)
        if any(not math.isfinite(v) or v < 0 for v in values):
            raise ValidationError(
                "Scoring weights must be finite and non-negative",
                details={"weights": list(values)},
            )
        if abs(sum(values) - 1.0) > _WEIGHT_SUM_TOLERANCE:
            raise ValidationError(
                "Scoring weights must sum to 1",
                details={"weights": list(values), "sum": sum(values)},
            )


DEFAULT_WEIGHTS = ScoringWeights(interests=0.5, majors=0.3, languages=0.2)


# ─────────────────────────────────────────────────────────────────────────────
#  University catalog entry
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class University:
    id: str
    name: str
    city: str
    region: str
    country: str
    tags: tuple[str, ...] = ()
    programs: tuple[str, ...] = ()
    verification_level: Literal["basic", "strict"] = "basic"
    website: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["tags"] = list(self.tags)
        data["programs"] = list(self.programs)
        return data
