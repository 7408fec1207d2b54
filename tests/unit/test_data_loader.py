"""
Unit tests for the seed data loader.
"""

import json

import pydantic
import pytest

from utils.data_loader import (
    load_accounts,
    load_catalog_configuration,
    load_profiles,
    load_universities,
)

from conftest import SEED_PATH


@pytest.fixture
def write_seed(tmp_path):
    def _write(payload: dict):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


class TestRepositorySeed:
    def test_profiles(self):
        profiles = {p.id: p for p in load_profiles(SEED_PATH)}

        assert set(profiles) == {"user_456", "candidate_001", "candidate_002", "candidate_003"}
        mika = profiles["user_456"]
        assert mika.university_id == "waseda"
        assert mika.interests == ("AI ethics", "Music")
        assert mika.preferred_locations == ("Tokyo", "Osaka")

    def test_universities(self):
        universities = {u.id: u for u in load_universities(SEED_PATH)}

        assert universities["utokyo"].verification_level == "strict"
        assert universities["osaka"].website == "https://www.omu.ac.jp"

    def test_accounts_point_at_known_profiles(self):
        profile_ids = {p.id for p in load_profiles(SEED_PATH)}

        assert set(load_accounts(SEED_PATH).values()) <= profile_ids

    def test_catalog_configuration(self):
        config = load_catalog_configuration(SEED_PATH)

        assert [i.id for i in config.intents] == ["same", "nearby", "open"]
        assert config.intents[2].radius_km is None
        assert [f.id for f in config.verification_flags if f.required] == [
            "student_id",
            "university_email",
        ]


class TestLoaderEdgeCases:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_profiles(tmp_path / "nope.json")

    def test_optional_fields_and_duplicates(self, write_seed):
        path = write_seed({
            "profiles": [
                {"id": "p1", "name": "Old", "universityId": "keio"},
                {"id": "p1", "name": "New", "universityId": "keio",
                 "interests": ["Go", "Go", "Chess"]},
            ]
        })

        (profile,) = load_profiles(path)

        assert profile.name == "New"
        assert profile.interests == ("Go", "Chess")
        assert profile.majors == ()
        assert profile.bio is None

    def test_empty_sections(self, write_seed):
        path = write_seed({})

        assert load_profiles(path) == []
        assert load_universities(path) == []
        assert load_accounts(path) == {}
        assert load_catalog_configuration(path).weight_presets == []

    def test_bad_weight_preset_is_rejected(self, write_seed):
        path = write_seed({
            "catalog": {
                "weightPresets": [
                    {"id": "broken", "title": "Broken",
                     "weights": {"interests": 0.6, "majors": 0.6, "languages": 0.2}},
                ]
            }
        })

        with pytest.raises(pydantic.ValidationError, match="sum to 1"):
            load_catalog_configuration(path)

    def test_two_active_presets_rejected(self, write_seed):
        preset = {"title": "T", "weights": {"interests": 0.5, "majors": 0.3, "languages": 0.2},
                  "isActive": True}
        path = write_seed({
            "catalog": {"weightPresets": [{"id": "a", **preset}, {"id": "b", **preset}]}
        })

        with pytest.raises(pydantic.ValidationError, match="At most one"):
            load_catalog_configuration(path)
