"""
models/repositories.py
──────────────────────
In-memory stores the services read from:

  InMemoryProfileStore   find_by_id / list / save
  AccountDirectory       verified email -> profile id
  UniversityCatalog      filtered university listing
  ConfigurationStore     catalog configuration + weight presets
"""

from __future__ import annotations

import threading
from typing import Iterable, Mapping, Optional, Protocol

from models.catalog import CatalogConfiguration, WeightPreset
from models.errors import NotFoundError
from models.profile import Profile, University


class ProfileStore(Protocol):
    def find_by_id(self, profile_id: str) -> Optional[Profile]: ...

    def list(self) -> list[Profile]: ...

    def save(self, profile: Profile) -> Profile: ...


class InMemoryProfileStore:
    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._profiles: dict[str, Profile] = {p.id: p for p in profiles}
        self._guard = threading.Lock()

    def find_by_id(self, profile_id: str) -> Optional[Profile]:
        with self._guard:
            return self._profiles.get(profile_id)

    def list(self) -> list[Profile]:
        # Snapshot: ranking works on an immutable copy of the pool
        with self._guard:
            return list(self._profiles.values())

    def save(self, profile: Profile) -> Profile:
        with self._guard:
            self._profiles[profile.id] = profile
        return profile

    def __len__(self) -> int:
        return len(self._profiles)


class AccountDirectory:
    """Binds a verified university email to the profile it owns."""

    def __init__(self, accounts: Mapping[str, str]) -> None:
        self._by_email = {email.strip().lower(): pid for email, pid in accounts.items()}

    def profile_id_for(self, email: str) -> str:
        try:
            return self._by_email[email.strip().lower()]
        except KeyError:
            raise NotFoundError("No profile is linked to this verified email.") from None


class UniversityCatalog:
    def __init__(self, universities: Iterable[University]) -> None:
        self._universities = list(universities)

    def list(
        self,
        search: str | None = None,
        program: str | None = None,
        country: str | None = None,
        limit: int | None = None,
    ) -> list[University]:
        rows = self._universities
        if country:
            rows = [u for u in rows if u.country.lower() == country.lower()]
        if program:
            needle = program.lower()
            rows = [u for u in rows if any(needle in p.lower() for p in u.programs)]
        if search:
            needle = search.lower()
            rows = [u for u in rows if needle in f"{u.name} {u.city} {u.region}".lower()]
        return rows[:limit] if limit is not None else list(rows)

    def __len__(self) -> int:
        return len(self._universities)


class ConfigurationStore:
    def __init__(self, configuration: CatalogConfiguration) -> None:
        self._configuration = configuration

    def get_catalog_configuration(self) -> CatalogConfiguration:
        return self._configuration

    def get_weight_preset(self, preset_id: str) -> WeightPreset:
        for preset in self._configuration.weight_presets:
            if preset.id == preset_id:
                return preset
        raise NotFoundError(
            f"Weight preset '{preset_id}' not found",
            details={"available": [p.id for p in self._configuration.weight_presets]},
        )

    def active_weight_preset(self) -> Optional[WeightPreset]:
        return next((p for p in self._configuration.weight_presets if p.is_active), None)
