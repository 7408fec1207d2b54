"""
models/errors.py
────────────────
Caller-visible error taxonomy.

Every error raised by the matching / OTP core is a ``DomainError`` carrying a
stable ``kind`` string and the HTTP status the API layer renders it with.
Anything that is *not* a ``DomainError`` is an internal fault.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    kind: str = "DomainError"
    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(DomainError):
    kind = "NotFound"
    status_code = 404


class ValidationError(DomainError):
    kind = "Validation"
    status_code = 422


class DomainNotAllowedError(DomainError):
    kind = "DomainNotAllowed"
    status_code = 400


class OtpExpiredError(DomainError):
    kind = "Expired"
    status_code = 400


class OtpMismatchError(DomainError):
    kind = "Mismatch"
    status_code = 400


class OtpExhaustedError(DomainError):
    kind = "Exhausted"
    status_code = 400


class UnauthorizedError(DomainError):
    kind = "Unauthorized"
    status_code = 401


class CredentialConfigurationError(RuntimeError):
    """Raised when the credential signer cannot be built (e.g. missing secret)."""
