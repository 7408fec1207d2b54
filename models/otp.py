"""
models/otp.py
═════════════
University email one-time passcode (OTP) authenticator.

Lifecycle per email address
───────────────────────────
  NONE ──request_code──▶ ISSUED ──verify_code──▶ VERIFIED  ─┐
                           │  ▲                              │
                           │  └── wrong code (attempts > 0)  ├─▶ NONE (record deleted)
                           ├──── expired ──▶ EXPIRED ────────┤
                           └──── 5th wrong code ▶ EXHAUSTED ─┘

  Issuing a new code for an email overwrites the previous record, so only the
  latest code is ever accepted.

Collaborators (all injected)
────────────────────────────
  OtpStore          get / set / delete records by email
  EmailSender       out-of-band delivery of the code
  CredentialSigner  mints the bearer token on success
  random source     anything with randint(a, b); secrets.SystemRandom by default
  clock             () -> aware datetime
"""

from __future__ import annotations

import secrets
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Iterable, Iterator, Optional, Protocol

from models.credentials import CredentialSigner, utc_now
from models.errors import (
    DomainNotAllowedError,
    NotFoundError,
    OtpExhaustedError,
    OtpExpiredError,
    OtpMismatchError,
    ValidationError,
)
from utils.logger import audit_logger, logger

CODE_LENGTH = 6
CODE_MIN = 100000
CODE_MAX = 999999
DEFAULT_OTP_TTL = timedelta(minutes=10)
DEFAULT_MAX_ATTEMPTS = 5


# ─────────────────────────────────────────────────────────────────────────────
#  Email helpers
# ─────────────────────────────────────────────────────────────────────────────

def split_email(email: str) -> tuple[str, str]:
    """Return (local_part, lower-cased domain) or raise ValidationError."""
    local, sep, domain = email.strip().rpartition("@")
    if not sep or not local or not domain or "@" in local:
        raise ValidationError("A valid email address is required", details={"email": email})
    return local, domain.lower()


def extract_domain(email: str) -> str:
    return split_email(email)[1]


def mask_email(email: str) -> str:
    """'student@u-tokyo.ac.jp' -> 'st***@u-tokyo.ac.jp'."""
    local, domain = split_email(email)
    return f"{local[:2]}***@{domain}"


# ─────────────────────────────────────────────────────────────────────────────
#  Records & results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OtpRecord:
    code: str
    issued_at: datetime
    expires_at: datetime
    attempts_left: int


@dataclass(frozen=True)
class OtpIssued:
    delivery_hint: str
    expires_in_seconds: int
    domain: str


@dataclass(frozen=True)
class OtpVerified:
    token: str
    verified_email: str
    verified_domain: str
    verified_at: datetime


# ─────────────────────────────────────────────────────────────────────────────
#  Store
# ─────────────────────────────────────────────────────────────────────────────

class OtpStore(Protocol):
    def get(self, email: str) -> Optional[OtpRecord]: ...

    def set(self, email: str, record: OtpRecord) -> None: ...

    def delete(self, email: str) -> None: ...


class InMemoryOtpStore:
    """Process-local OtpStore. Replace with a shared cache in production."""

    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._guard = threading.Lock()

    def get(self, email: str) -> Optional[OtpRecord]:
        with self._guard:
            return self._records.get(email)

    def set(self, email: str, record: OtpRecord) -> None:
        with self._guard:
            self._records[email] = record

    def delete(self, email: str) -> None:
        with self._guard:
            self._records.pop(email, None)

    def __len__(self) -> int:
        return len(self._records)


class KeyedLock:
    """Per-key mutual exclusion; unrelated keys never block each other."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}   # key -> [lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# ─────────────────────────────────────────────────────────────────────────────
#  Delivery
# ─────────────────────────────────────────────────────────────────────────────

class EmailSender(Protocol):
    def send_code(self, email: str, code: str, expires_at: datetime) -> None: ...


class LoggingEmailSender:
    """Stand-in sender used until a real mail transport is wired in."""

    def send_code(self, email: str, code: str, expires_at: datetime) -> None:
        logger.bind(console_only=True).debug(
            f"[mock-email] Sending OTP {code} to {mask_email(email)} "
            f"(valid until {expires_at.isoformat()})"
        )


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


# ─────────────────────────────────────────────────────────────────────────────
#  Authenticator
# ─────────────────────────────────────────────────────────────────────────────

class EmailOtpAuthenticator:
    """
    Parameters
    ----------
    allowlist     : permitted email domains (compared lower-cased)
    signer        : CredentialSigner used on successful verification
    store         : OtpStore (InMemoryOtpStore if omitted)
    sender        : EmailSender (LoggingEmailSender if omitted)
    rng           : random source with randint(); secrets.SystemRandom if omitted
    clock         : returns the current aware datetime
    ttl           : code validity window
    max_attempts  : wrong codes allowed before the record is discarded
    """

    def __init__(
        self,
        allowlist: Iterable[str],
        signer: CredentialSigner,
        store: OtpStore | None = None,
        sender: EmailSender | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = DEFAULT_OTP_TTL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.allowlist = frozenset(d.strip().lower() for d in allowlist)
        self.signer = signer
        self.store = store if store is not None else InMemoryOtpStore()
        self.sender = sender if sender is not None else LoggingEmailSender()
        self.rng = rng if rng is not None else secrets.SystemRandom()
        self.clock = clock
        self.ttl = ttl
        self.max_attempts = max_attempts
        self._locks = KeyedLock()

    # ── issuance ──────────────────────────────────────────────────────────────

    def request_code(self, email: str) -> OtpIssued:
        email = email.strip()
        domain = extract_domain(email)
        if domain not in self.allowlist:
            audit_logger.info(f"OTP refused for non-allow-listed domain '{domain}'")
            raise DomainNotAllowedError(
                "This university email domain is not supported yet.",
                details={"domain": domain},
            )

        code = self._generate_code()
        with self._locks.hold(email):
            now = self.clock()
            record = OtpRecord(
                code=code,
                issued_at=now,
                expires_at=now + self.ttl,
                attempts_left=self.max_attempts,
            )
            self.store.set(email, record)

        self.sender.send_code(email, code, record.expires_at)
        audit_logger.info(f"OTP issued for {mask_email(email)}")
        return OtpIssued(
            delivery_hint=mask_email(email),
            expires_in_seconds=int(self.ttl.total_seconds()),
            domain=domain,
        )

    def _generate_code(self) -> str:
        return str(self.rng.randint(CODE_MIN, CODE_MAX))

    # ── verification ──────────────────────────────────────────────────────────

    def verify_code(self, email: str, code: str) -> OtpVerified:
        email = email.strip()
        domain = extract_domain(email)
        if len(code) != CODE_LENGTH or not (code.isascii() and code.isdigit()):
            raise ValidationError(
                f"The code must be exactly {CODE_LENGTH} digits.",
                details={"code_length": len(code)},
            )
        # fail before the record is consumed
        self.signer.ensure_configured()

        with self._locks.hold(email):
            record = self.store.get(email)
            if record is None:
                raise NotFoundError("No OTP request was found for this email address.")

            now = self.clock()
            if now > record.expires_at:
                self.store.delete(email)
                audit_logger.info(f"OTP expired for {mask_email(email)}")
                raise OtpExpiredError("The code has expired. Please request a new one.")

            if not secrets.compare_digest(record.code, code):
                attempts_left = record.attempts_left - 1
                if attempts_left <= 0:
                    self.store.delete(email)
                    audit_logger.warning(f"OTP attempts exhausted for {mask_email(email)}")
                    raise OtpExhaustedError(
                        "Too many incorrect attempts. Please request a new code."
                    )
                self.store.set(email, replace(record, attempts_left=attempts_left))
                raise OtpMismatchError(
                    "The code does not match. Please check and try again.",
                    details={"attempts_left": attempts_left},
                )

            self.store.delete(email)

        token = self.signer.issue(email, domain)
        audit_logger.info(f"OTP verified for {mask_email(email)}")
        return OtpVerified(
            token=token,
            verified_email=email,
            verified_domain=domain,
            verified_at=now,
        )
