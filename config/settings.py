"""
config/settings.py
──────────────────
Centralised settings loaded from .env via pydantic-settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Server
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"

    # Data
    data_dir: Path = Path("./data")
    seed_file: str = "seed.json"

    # Email OTP / credential
    email_auth_jwt_secret: str = Field(default="", alias="EMAIL_AUTH_JWT_SECRET")
    jwt_issuer: str = "matching-app-email-otp"
    credential_ttl_seconds: int = 2 * 60 * 60
    otp_ttl_seconds: int = 10 * 60
    otp_max_attempts: int = 5
    email_domain_allowlist: list[str] = [
        "u-tokyo.ac.jp",
        "kyoto-u.ac.jp",
        "waseda.jp",
        "keio.jp",
        "omu.ac.jp",
    ]

    # Matching
    default_page_limit: int = 10
    max_page_limit: int = 25

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path("./logs/app.log")
    audit_log_file: Path = Path("./logs/audit.log")
    log_rotation: str = "10 MB"
    log_retention: str = "14 days"
    log_json: bool = True

    @model_validator(mode="after")
    def _check_page_limits(self) -> "Settings":
        if not 1 <= self.default_page_limit <= self.max_page_limit:
            raise ValueError("default_page_limit must be between 1 and max_page_limit")
        return self

    @property
    def seed_path(self) -> Path:
        return self.data_dir / self.seed_file


@lru_cache
def get_settings() -> Settings:
    return Settings()
