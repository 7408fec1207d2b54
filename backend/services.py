"""
backend/services.py
───────────────────
Use cases the routers call. Each takes the caller's identity explicitly
(a profile id resolved from the verified credential); nothing here reads a
"current user" from global state.
"""

from __future__ import annotations

from typing import Any

from models.errors import NotFoundError, ValidationError
from models.matchmaker import MatchmakingEngine
from models.profile import Profile, RankedPage, ScoringWeights
from models.repositories import ConfigurationStore, ProfileStore
from utils.logger import logger

EDITABLE_PROFILE_FIELDS = frozenset(
    {"name", "university_id", "majors", "interests", "languages", "bio", "preferred_locations"}
)


class MatchingService:
    """Load requester + pool, pick the weights, rank."""

    def __init__(
        self,
        profiles: ProfileStore,
        configuration: ConfigurationStore,
        engine: MatchmakingEngine,
    ) -> None:
        self.profiles = profiles
        self.configuration = configuration
        self.engine = engine

    def resolve_weights(self, preset_id: str | None = None) -> ScoringWeights:
        if preset_id is not None:
            return self.configuration.get_weight_preset(preset_id).weights.to_scoring_weights()
        active = self.configuration.active_weight_preset()
        return active.weights.to_scoring_weights() if active else self.engine.weights

    def rank_candidates(
        self,
        requester_id: str,
        offset: int = 0,
        limit: int = 10,
        preset_id: str | None = None,
    ) -> RankedPage:
        requester = self.profiles.find_by_id(requester_id)
        if requester is None:
            raise NotFoundError("Current profile not found")

        weights = self.resolve_weights(preset_id)
        page = self.engine.rank(
            requester, self.profiles.list(), offset=offset, limit=limit, weights=weights
        )
        logger.debug(
            f"Ranked {page.total} candidates for {requester_id} "
            f"(offset={offset}, limit={limit}, next={page.next_offset})"
        )
        return page


class ProfileService:
    def __init__(self, profiles: ProfileStore) -> None:
        self.profiles = profiles

    def get_profile(self, profile_id: str) -> Profile:
        profile = self.profiles.find_by_id(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def update_profile(self, profile_id: str, changes: dict[str, Any]) -> Profile:
        unknown = set(changes) - EDITABLE_PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown profile fields", details={"fields": sorted(unknown)}
            )

        updated = self.get_profile(profile_id).merged(**changes)
        self._validate(updated)
        logger.info(f"Profile {profile_id} updated: {sorted(changes)}")
        return self.profiles.save(updated)

    @staticmethod
    def _validate(profile: Profile) -> None:
        if not profile.name.strip():
            raise ValidationError("Profile name is required")
        if not profile.university_id:
            raise ValidationError("University must be specified")
