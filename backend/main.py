"""
backend/main.py
═══════════════
FastAPI application for CampusMatch — university-verified student matching.

Endpoints
─────────
  GET  /                         — Banner
  GET  /healthz                  — Liveness / readiness probe

  POST /auth/email/request       — Issue a university email OTP
  POST /auth/email/verify        — Verify the OTP, receive a bearer token

  GET  /matches/candidates       — Ranked candidates for the caller   (bearer)
  GET  /profile                  — Current profile                    (bearer)
  PUT  /profile                  — Update current profile             (bearer)

  GET  /catalog/universities     — University catalog
  GET  /catalog/configuration    — Intents, weight presets, verification flags

  Run with:
      python -m backend.main          (APP_HOST, APP_PORT; reload when APP_ENV=development)
      uvicorn backend.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from backend.dependencies import get_profile_store, get_university_catalog
from backend.routers import auth, catalog, match, profile
from backend.schemas import HealthResponse
from config.settings import get_settings
from models.errors import DomainError
from utils.logger import logger

APP_VERSION = "0.1.0"

# ─────────────────────────────────────────────────────────────────────────────
#  App initialisation
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="CampusMatch — Matching App API",
    description=(
        "University-email-verified student matching: OTP sign-in, "
        "profile-overlap candidate ranking and the university catalog."
    ),
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],      # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(match.router)
app.include_router(profile.router)
app.include_router(catalog.router)


# ─────────────────────────────────────────────────────────────────────────────
#  Request context
# ─────────────────────────────────────────────────────────────────────────────

REQUEST_ID_HEADER = "X-Request-ID"


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line of a request with its id and log the outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    started = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception as exc:
            response = _internal_error(request, exc)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# ─────────────────────────────────────────────────────────────────────────────
#  Error envelope: {"error": kind, "message": ..., "details": ...}
# ─────────────────────────────────────────────────────────────────────────────

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation",
            "message": "Request validation failed.",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback, answer with a generic body that leaks nothing."""
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "InternalServerError", "message": "An unexpected error occurred."},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # faults raised outside request_context (other middleware)
    return _internal_error(request, exc)


# ─────────────────────────────────────────────────────────────────────────────
#  Meta
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/", tags=["Meta"])
def root() -> dict:
    return {"message": "Matching App API is running"}


@app.get("/healthz", response_model=HealthResponse, tags=["Meta"])
def health_check() -> HealthResponse:
    """
    Liveness & readiness probe.
    Returns seed dataset sizes; degraded if the seed data cannot be loaded.
    """
    try:
        return HealthResponse(
            status="ok",
            profiles_loaded=len(get_profile_store()),
            universities_loaded=len(get_university_catalog()),
            version=APP_VERSION,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.warning(f"Health check degraded: {exc}")
        return HealthResponse(
            status=f"degraded: {exc}",
            profiles_loaded=0,
            universities_loaded=0,
            version=APP_VERSION,
        )


@app.get("/openapi", include_in_schema=False)
def openapi_redirect() -> RedirectResponse:
    return RedirectResponse(url="/openapi.json", status_code=302)


# ─────────────────────────────────────────────────────────────────────────────
#  Entrypoint
# ─────────────────────────────────────────────────────────────────────────────

def run() -> None:
    """Serve the app with uvicorn using APP_HOST / APP_PORT / APP_ENV."""
    settings = get_settings()
    uvicorn.run(
        "backend.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "development",
    )


if __name__ == "__main__":
    run()
