"""
models/credentials.py
─────────────────────
Signed, time-limited credential asserting a verified university email.

The credential is an HS256 JWT with claims ``email``, ``domain``, ``iss``,
``iat`` and ``exp``. Nothing is stored server-side; a token is valid if its
signature, issuer and expiry check out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from models.errors import CredentialConfigurationError, UnauthorizedError
from utils.logger import audit_logger

DEFAULT_ISSUER = "matching-app-email-otp"
DEFAULT_TTL = timedelta(hours=2)
ALGORITHM = "HS256"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VerifiedIdentity:
    email: str
    domain: str


class CredentialSigner:
    """Issue and verify email-OTP bearer tokens."""

    def __init__(
        self,
        secret: str,
        issuer: str = DEFAULT_ISSUER,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        # secret is checked on use; code issuance does not need it
        self._secret = secret
        self.issuer = issuer
        self.ttl = ttl
        self._clock = clock

    def ensure_configured(self) -> str:
        if not self._secret:
            raise CredentialConfigurationError(
                "Email OTP auth secret is missing. Please set EMAIL_AUTH_JWT_SECRET."
            )
        return self._secret

    def issue(self, email: str, domain: str) -> str:
        secret = self.ensure_configured()
        issued_at = self._clock()
        payload = {
            "email": email,
            "domain": domain,
            "iss": self.issuer,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> VerifiedIdentity:
        secret = self.ensure_configured()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={"require": ["exp", "iss"]},
            )
        except jwt.PyJWTError as exc:
            audit_logger.info(f"Email OTP token rejected: {exc.__class__.__name__}")
            raise UnauthorizedError("Invalid or expired email OTP token.") from exc

        email = payload.get("email")
        domain = payload.get("domain")
        if not isinstance(email, str) or not isinstance(domain, str) or not email or not domain:
            raise UnauthorizedError("Email OTP token payload is invalid.")
        return VerifiedIdentity(email=email, domain=domain)
