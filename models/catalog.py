"""
models/catalog.py
─────────────────
Catalog configuration value structs: intent options, scoring weight presets
and verification flags. Validated with pydantic when loaded from seed data so
a malformed preset fails at startup, not on first use.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models import errors
from models.profile import ScoringWeights


class _CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class IntentOption(_CatalogModel):
    id: str = Field(..., min_length=1)
    label: str
    description: str
    radius_km: Optional[int] = Field(None, alias="radiusKm", ge=0)


class PresetWeights(_CatalogModel):
    interests: float = Field(..., ge=0.0, le=1.0)
    majors: float = Field(..., ge=0.0, le=1.0)
    languages: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_sum(self) -> "PresetWeights":
        try:
            self.to_scoring_weights()
        except errors.ValidationError as exc:
            raise ValueError(exc.message) from exc
        return self

    def to_scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            interests=self.interests, majors=self.majors, languages=self.languages
        )


class WeightPreset(_CatalogModel):
    id: str = Field(..., min_length=1)
    title: str
    weights: PresetWeights
    note: str = ""
    is_active: bool = Field(False, alias="isActive")


class VerificationFlag(_CatalogModel):
    id: str = Field(..., min_length=1)
    label: str
    description: str
    required: bool


class CatalogConfiguration(_CatalogModel):
    intents: list[IntentOption] = Field(default_factory=list)
    weight_presets: list[WeightPreset] = Field(default_factory=list, alias="weightPresets")
    verification_flags: list[VerificationFlag] = Field(
        default_factory=list, alias="verificationFlags"
    )

    @model_validator(mode="after")
    def _one_active_preset(self) -> "CatalogConfiguration":
        active = [p.id for p in self.weight_presets if p.is_active]
        if len(active) > 1:
            raise ValueError(f"At most one weight preset may be active, got {active}")
        return self
