"""
backend/routers/auth.py
───────────────────────
University email OTP endpoints.

Endpoints
─────────
POST /auth/email/request   — Issue a one-time passcode to an allow-listed domain
POST /auth/email/verify    — Verify the passcode and return a bearer token
"""

from fastapi import APIRouter, Depends

from backend.dependencies import get_authenticator
from backend.schemas import (
    ErrorResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    OtpVerifyResponse,
)
from models.otp import EmailOtpAuthenticator

router = APIRouter(prefix="/auth/email", tags=["Auth"])


@router.post(
    "/request",
    response_model=OtpRequestResponse,
    summary="Request a university email OTP",
    responses={400: {"model": ErrorResponse, "description": "Email domain is not eligible"}},
)
def request_otp(
    body: OtpRequest,
    authenticator: EmailOtpAuthenticator = Depends(get_authenticator),
) -> OtpRequestResponse:
    """Validates the domain against the allow-list and issues a 6-digit code (valid 10 min)."""
    issued = authenticator.request_code(body.email)
    return OtpRequestResponse(
        delivery_hint=issued.delivery_hint,
        expires_in_seconds=issued.expires_in_seconds,
        domain=issued.domain,
    )


@router.post(
    "/verify",
    response_model=OtpVerifyResponse,
    summary="Verify a university email OTP",
    responses={
        400: {"model": ErrorResponse, "description": "Code expired, mismatched or attempts exhausted"},
        404: {"model": ErrorResponse, "description": "No OTP request found for the email"},
    },
)
def verify_otp(
    body: OtpVerifyRequest,
    authenticator: EmailOtpAuthenticator = Depends(get_authenticator),
) -> OtpVerifyResponse:
    """Verifies the code and returns a JWT valid for two hours."""
    verified = authenticator.verify_code(body.email, body.code)
    return OtpVerifyResponse(
        token=verified.token,
        verified_email=verified.verified_email,
        verified_domain=verified.verified_domain,
        verified_at=verified.verified_at,
    )
