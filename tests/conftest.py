"""
Shared test configuration.

Points settings at the repository seed data and a test signing secret before
any application module is imported, and provides deterministic clocks,
random sources and an in-memory mail outbox for the OTP tests. API tests get a
TestClient whose OTP authenticator, signer and profile store are fresh per test.
"""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SEED_PATH = ROOT / "data" / "seed.json"
TEST_SECRET = "test-secret-for-email-otp-credentials-0123456789"

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("EMAIL_AUTH_JWT_SECRET", TEST_SECRET)
os.environ.setdefault("LOG_FILE", str(ROOT / "logs" / "test.log"))
os.environ.setdefault("AUDIT_LOG_FILE", str(ROOT / "logs" / "test-audit.log"))

from models.credentials import CredentialSigner  # noqa: E402
from models.otp import EmailOtpAuthenticator, InMemoryOtpStore  # noqa: E402
from models.profile import Profile  # noqa: E402
from models.repositories import InMemoryProfileStore  # noqa: E402
from utils.data_loader import load_profiles  # noqa: E402

ALLOWLIST = ["u-tokyo.ac.jp", "kyoto-u.ac.jp", "waseda.jp", "keio.jp", "omu.ac.jp"]
MIKA = "mika.sato@waseda.jp"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 4, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class SequenceRandom:
    """randint() that replays a fixed sequence of values."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self._values.pop(0)


class RecordingSender:
    """EmailSender that keeps every dispatched code."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_code(self, email: str, code: str, expires_at: datetime) -> None:
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return next(code for addr, code in reversed(self.sent) if addr == email)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def outbox() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def otp_store() -> InMemoryOtpStore:
    return InMemoryOtpStore()


@pytest.fixture
def signer() -> CredentialSigner:
    return CredentialSigner(secret=TEST_SECRET)


@pytest.fixture
def authenticator(signer, otp_store, outbox, clock) -> EmailOtpAuthenticator:
    return EmailOtpAuthenticator(
        allowlist=ALLOWLIST,
        signer=signer,
        store=otp_store,
        sender=outbox,
        clock=clock,
    )


@pytest.fixture
def make_profile():
    """Factory for Profile objects with sensible defaults."""

    def _make(profile_id: str, **fields) -> Profile:
        fields.setdefault("name", profile_id.title())
        fields.setdefault("university_id", "utokyo")
        return Profile(id=profile_id, **fields)

    return _make


# ── API fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore(load_profiles(SEED_PATH))


@pytest.fixture
def client(authenticator, signer, profile_store):
    """TestClient whose authenticator, signer and profile store are fresh per test."""
    from backend.dependencies import get_authenticator, get_profile_store, get_signer
    from backend.main import app

    app.dependency_overrides[get_authenticator] = lambda: authenticator
    app.dependency_overrides[get_signer] = lambda: signer
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, outbox):
    """Run the OTP flow for ``email`` and return an Authorization header."""

    def _login(email: str = MIKA) -> dict[str, str]:
        client.post("/auth/email/request", json={"email": email})
        response = client.post(
            "/auth/email/verify", json={"email": email, "code": outbox.last_code(email)}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
