"""
utils/data_loader.py
────────────────────
Loads and caches the seed dataset (data/seed.json).

Sections:
  - profiles        student profiles (camelCase keys)
  - accounts        verified email -> profile id
  - universities    university catalog entries
  - catalog         intents, weightPresets, verificationFlags
"""

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from config.settings import get_settings
from models.catalog import CatalogConfiguration
from models.profile import Profile, University
from utils.logger import logger

PROFILE_LIST_COLS    = ["majors", "interests", "languages", "preferred_locations"]
UNIVERSITY_LIST_COLS = ["tags", "programs"]


# ── internal helpers ──────────────────────────────────────────────────────────

def _normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """camelCase / spaced column names -> snake_case."""
    df.columns = [
        re.sub(r"[^a-z0-9]+", "_", re.sub(r"(?<!^)(?=[A-Z])", "_", c.strip()).lower()).strip("_")
        for c in df.columns
    ]
    return df


def _frame(records: list[dict], list_cols: list[str], optional_cols: list[str]) -> pd.DataFrame:
    df = _normalise_columns(pd.DataFrame.from_records(records))
    if df.empty:
        return df
    for col in list_cols + optional_cols:
        if col not in df.columns:
            df[col] = None
    for col in list_cols:
        df[col] = df[col].apply(lambda v: [str(x) for x in v] if isinstance(v, list) else [])
    df = df.dropna(subset=["id"]).copy()
    df["id"] = df["id"].astype(str)
    return df.drop_duplicates(subset="id", keep="last")


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _resolve(path: Path | str | None) -> Path:
    return Path(path) if path is not None else get_settings().seed_path


# ── public API ────────────────────────────────────────────────────────────────

@lru_cache(maxsize=4)
def load_seed(path: Path | str | None = None) -> dict[str, Any]:
    """
    Read the seed file once per process and return its raw sections.
    """
    seed_path = _resolve(path)
    if not seed_path.exists():
        raise FileNotFoundError(
            f"Seed data not found at {seed_path}. "
            "Place seed.json inside the ./data/ folder or set DATA_DIR."
        )

    logger.info(f"Loading seed data from {seed_path}")
    with seed_path.open(encoding="utf-8") as fh:
        raw = json.load(fh)

    for name in ("profiles", "universities"):
        logger.info(f"Seed section '{name}': {len(raw.get(name, []))} rows")
    return raw


def load_profiles(path: Path | str | None = None) -> list[Profile]:
    df = _frame(load_seed(path).get("profiles", []), PROFILE_LIST_COLS, ["bio"])
    return [
        Profile(
            id=row["id"],
            name=str(row["name"]),
            university_id=str(row["university_id"]),
            majors=tuple(row["majors"]),
            interests=tuple(row["interests"]),
            languages=tuple(row["languages"]),
            bio=_opt_str(row["bio"]),
            preferred_locations=tuple(row["preferred_locations"]),
        )
        for row in df.to_dict(orient="records")
    ]


def load_universities(path: Path | str | None = None) -> list[University]:
    df = _frame(
        load_seed(path).get("universities", []), UNIVERSITY_LIST_COLS, ["website", "verification_level"]
    )
    return [
        University(
            id=row["id"],
            name=str(row["name"]),
            city=str(row["city"]),
            region=str(row["region"]),
            country=str(row["country"]),
            tags=tuple(row["tags"]),
            programs=tuple(row["programs"]),
            verification_level=_opt_str(row["verification_level"]) or "basic",
            website=_opt_str(row["website"]),
        )
        for row in df.to_dict(orient="records")
    ]


def load_accounts(path: Path | str | None = None) -> dict[str, str]:
    return {str(k): str(v) for k, v in load_seed(path).get("accounts", {}).items()}


def load_catalog_configuration(path: Path | str | None = None) -> CatalogConfiguration:
    return CatalogConfiguration.model_validate(load_seed(path).get("catalog", {}))
