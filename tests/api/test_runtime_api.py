"""
API tests for runtime configuration: page-size settings, internal faults,
a missing signing secret and the uvicorn entrypoint.
"""

import json

import pytest
from fastapi.testclient import TestClient

import backend.main
from backend.dependencies import get_authenticator, get_signer, get_university_catalog
from backend.main import app
from config.settings import Settings, get_settings
from models.credentials import CredentialSigner
from models.otp import EmailOtpAuthenticator
from utils.logger import logger

from conftest import ALLOWLIST, MIKA

GENERIC_500 = {"error": "InternalServerError", "message": "An unexpected error occurred."}


class TestPageLimitSettings:
    @pytest.fixture
    def small_pages(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(
            default_page_limit=2, max_page_limit=2
        )

    def test_default_limit_comes_from_settings(self, client, login, small_pages):
        body = client.get("/matches/candidates", headers=login()).json()

        assert [c["id"] for c in body["results"]] == ["candidate_002", "candidate_003"]
        assert body["nextOffset"] == 2

    def test_engine_enforces_configured_maximum(self, client, login, small_pages):
        response = client.get("/matches/candidates", params={"limit": 3}, headers=login())

        assert response.status_code == 422
        assert response.json()["message"] == "limit must be between 1 and 2"

    def test_openapi_bound_matches_settings(self, client):
        parameters = client.get("/openapi.json").json()["paths"]["/matches/candidates"]["get"][
            "parameters"
        ]
        (limit,) = [p for p in parameters if p["name"] == "limit"]

        assert f'"maximum": {get_settings().max_page_limit}' in json.dumps(limit["schema"])

    def test_default_must_not_exceed_maximum(self):
        with pytest.raises(ValueError):
            Settings(default_page_limit=30, max_page_limit=25)


class TestInternalErrors:
    @pytest.fixture
    def failing_client(self, client):
        def broken_catalog():
            raise RuntimeError("secret internals")

        app.dependency_overrides[get_university_catalog] = broken_catalog
        return TestClient(app, raise_server_exceptions=False)

    def test_generic_envelope(self, failing_client):
        response = failing_client.get("/catalog/universities")

        assert response.status_code == 500
        assert response.json() == GENERIC_500
        assert "secret internals" not in response.text

    def test_request_id_survives_the_fault(self, failing_client):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            response = failing_client.get(
                "/catalog/universities", headers={"X-Request-ID": "trace-500"}
            )
        finally:
            logger.remove(sink_id)

        assert response.headers["x-request-id"] == "trace-500"
        errors = [r for r in records if r["level"].name == "ERROR"]
        assert errors and errors[-1]["extra"]["request_id"] == "trace-500"
        assert errors[-1]["exception"] is not None
        assert any(r["message"].startswith("GET /catalog/universities -> 500") for r in records)


class TestMissingSecret:
    @pytest.fixture
    def unsigned(self, client, outbox, clock):
        signer = CredentialSigner(secret="")
        authenticator = EmailOtpAuthenticator(
            allowlist=ALLOWLIST, signer=signer, sender=outbox, clock=clock
        )
        app.dependency_overrides[get_signer] = lambda: signer
        app.dependency_overrides[get_authenticator] = lambda: authenticator

    def test_request_still_works(self, client, unsigned):
        response = client.post("/auth/email/request", json={"email": MIKA})

        assert response.status_code == 200

    def test_verify_is_an_internal_error(self, client, outbox, unsigned):
        client.post("/auth/email/request", json={"email": MIKA})

        response = client.post(
            "/auth/email/verify", json={"email": MIKA, "code": outbox.last_code(MIKA)}
        )

        assert response.status_code == 500
        assert response.json() == GENERIC_500


class TestEntrypoint:
    def test_run_uses_server_settings(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            backend.main.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs))
        )

        backend.main.run()

        settings = get_settings()
        assert calls == [
            (
                ("backend.main:app",),
                {
                    "host": settings.app_host,
                    "port": settings.app_port,
                    "reload": settings.app_env == "development",
                },
            )
        ]
