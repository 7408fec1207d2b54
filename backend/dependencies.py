"""
backend/dependencies.py
───────────────────────
Process-wide singletons and FastAPI dependencies.

Stores are built once from the seed data; the credential signer and the OTP
authenticator are built once from settings; the matching engine is sized from
settings on every request. Tests swap any of them through
``app.dependency_overrides``.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.services import MatchingService, ProfileService
from config.settings import Settings, get_settings
from models.credentials import CredentialSigner, VerifiedIdentity
from models.errors import UnauthorizedError
from models.matchmaker import MatchmakingEngine
from models.otp import EmailOtpAuthenticator
from models.repositories import (
    AccountDirectory,
    ConfigurationStore,
    InMemoryProfileStore,
    UniversityCatalog,
)
from utils.data_loader import (
    load_accounts,
    load_catalog_configuration,
    load_profiles,
    load_universities,
)
from utils.logger import logger

bearer_scheme = HTTPBearer(
    auto_error=False,
    scheme_name="EmailOtpToken",
    description="JWT issued after verifying a university email OTP.",
)


# ── stores (singleton per process) ────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_profile_store() -> InMemoryProfileStore:
    store = InMemoryProfileStore(load_profiles())
    logger.info(f"Profile store ready — {len(store)} profiles")
    return store


@lru_cache(maxsize=1)
def get_account_directory() -> AccountDirectory:
    return AccountDirectory(load_accounts())


@lru_cache(maxsize=1)
def get_university_catalog() -> UniversityCatalog:
    return UniversityCatalog(load_universities())


@lru_cache(maxsize=1)
def get_configuration_store() -> ConfigurationStore:
    return ConfigurationStore(load_catalog_configuration())


# ── engine / auth ─────────────────────────────────────────────────────────────

def get_engine(settings: Settings = Depends(get_settings)) -> MatchmakingEngine:
    return MatchmakingEngine(max_limit=settings.max_page_limit)


@lru_cache(maxsize=1)
def get_signer() -> CredentialSigner:
    settings = get_settings()
    return CredentialSigner(
        secret=settings.email_auth_jwt_secret,
        issuer=settings.jwt_issuer,
        ttl=timedelta(seconds=settings.credential_ttl_seconds),
    )


@lru_cache(maxsize=1)
def get_authenticator() -> EmailOtpAuthenticator:
    settings = get_settings()
    logger.info(f"Email OTP allow-list: {settings.email_domain_allowlist}")
    return EmailOtpAuthenticator(
        allowlist=settings.email_domain_allowlist,
        signer=get_signer(),
        ttl=timedelta(seconds=settings.otp_ttl_seconds),
        max_attempts=settings.otp_max_attempts,
    )


# ── services ──────────────────────────────────────────────────────────────────

def get_matching_service(
    profiles: InMemoryProfileStore = Depends(get_profile_store),
    configuration: ConfigurationStore = Depends(get_configuration_store),
    engine: MatchmakingEngine = Depends(get_engine),
) -> MatchingService:
    return MatchingService(profiles, configuration, engine)


def get_profile_service(
    profiles: InMemoryProfileStore = Depends(get_profile_store),
) -> ProfileService:
    return ProfileService(profiles)


# ── caller identity ───────────────────────────────────────────────────────────

def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    signer: CredentialSigner = Depends(get_signer),
) -> VerifiedIdentity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing email OTP bearer token.")
    return signer.verify(credentials.credentials)


def get_current_profile_id(
    identity: VerifiedIdentity = Depends(get_current_identity),
    directory: AccountDirectory = Depends(get_account_directory),
) -> str:
    return directory.profile_id_for(identity.email)
