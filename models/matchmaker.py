"""
models/matchmaker.py
════════════════════
MatchmakingEngine — profile-overlap scoring (0–1) between a requesting
student and a pool of candidate profiles.

Three Scoring Dimensions
────────────────────────
  Interests   default weight 0.5
  Majors      default weight 0.3
  Languages   default weight 0.2

Each dimension contributes an overlap ratio measured against the
*candidate's* own set:

    ratio = |requester ∩ candidate| / max(|candidate|, 1)

so a candidate with an empty set for a dimension scores 0 there.

Output
──────
  RankedPage(results=[Candidate, …], next_offset=int | None, total=int)

  Candidates are ordered by match_score descending, ties broken by id
  ascending, then sliced with offset / limit.

Usage
─────
  from models.matchmaker import MatchmakingEngine

  engine = MatchmakingEngine()
  page   = engine.rank(me, store.list(), offset=0, limit=10)
  page   = engine.rank(me, pool, weights=ScoringWeights(0.3, 0.5, 0.2))
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from models.errors import ValidationError
from models.profile import DEFAULT_WEIGHTS, Candidate, Profile, RankedPage, ScoringWeights


MIN_PAGE_LIMIT = 1
MAX_PAGE_LIMIT = 25

_TWO_PLACES = Decimal("0.01")


def round_score(value: float) -> float:
    """Round half-up to 2 decimals on the exact binary value of ``value``."""
    return float(Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def overlap_ratio(requester_values: Sequence[str], candidate_values: Sequence[str]) -> float:
    shared = set(requester_values).intersection(candidate_values)
    return len(shared) / max(len(set(candidate_values)), 1)


# ─────────────────────────────────────────────────────────────────────────────
#  Main Engine
# ─────────────────────────────────────────────────────────────────────────────

class MatchmakingEngine:
    """
    Parameters
    ----------
    weights   : default ScoringWeights used when rank()/score() get none
    max_limit : upper bound for the page size (1 … max_limit)
    """

    def __init__(
        self,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> None:
        self.weights = weights
        self.max_limit = max_limit

    # ── scoring ───────────────────────────────────────────────────────────────

    def score(
        self,
        requester: Profile,
        candidate: Profile,
        weights: ScoringWeights | None = None,
    ) -> float:
        w = weights or self.weights
        interest = overlap_ratio(requester.interests, candidate.interests)
        major    = overlap_ratio(requester.majors, candidate.majors)
        language = overlap_ratio(requester.languages, candidate.languages)
        raw = w.interests * interest + w.majors * major + w.languages * language
        # Float noise can push a perfect match a hair past 1.0
        return round_score(min(max(raw, 0.0), 1.0))

    def build_candidate(
        self,
        requester: Profile,
        candidate: Profile,
        weights: ScoringWeights | None = None,
    ) -> Candidate:
        wanted = set(requester.interests)
        return Candidate(
            id=candidate.id,
            name=candidate.name,
            university_id=candidate.university_id,
            match_score=self.score(requester, candidate, weights),
            shared_interests=[i for i in candidate.interests if i in wanted],
            introduction=candidate.bio,
        )

    # ── ranking ───────────────────────────────────────────────────────────────

    def rank(
        self,
        requester: Profile,
        pool: Sequence[Profile],
        offset: int = 0,
        limit: int = 10,
        weights: ScoringWeights | None = None,
    ) -> RankedPage:
        self._check_page(offset, limit)

        scored = [
            self.build_candidate(requester, profile, weights)
            for profile in pool
            if profile.id != requester.id
        ]
        scored.sort(key=lambda c: (-c.match_score, c.id))

        total   = len(scored)
        results = scored[offset:offset + limit]
        end     = offset + len(results)
        return RankedPage(
            results=results,
            next_offset=end if end < total else None,
            total=total,
        )

    def _check_page(self, offset: int, limit: int) -> None:
        if offset < 0:
            raise ValidationError(
                "offset must be zero or greater", details={"offset": offset}
            )
        if not MIN_PAGE_LIMIT <= limit <= self.max_limit:
            raise ValidationError(
                f"limit must be between {MIN_PAGE_LIMIT} and {self.max_limit}",
                details={"limit": limit},
            )
