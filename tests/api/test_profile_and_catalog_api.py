"""
API tests for /profile, /catalog/* and the meta endpoints.
"""


class TestProfile:
    def test_get_profile(self, client, login):
        response = client.get("/profile", headers=login())

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "user_456"
        assert body["universityId"] == "waseda"
        assert body["preferredLocations"] == ["Tokyo", "Osaka"]

    def test_update_profile(self, client, login, profile_store):
        response = client.put(
            "/profile",
            json={"interests": ["Music", "Hiking"], "preferredLocations": ["Kyoto"]},
            headers=login(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["interests"] == ["Music", "Hiking"]
        assert body["preferredLocations"] == ["Kyoto"]
        assert body["majors"] == ["Economics", "Data Science"]
        assert profile_store.find_by_id("user_456").interests == ("Music", "Hiking")

    def test_blank_name_rejected(self, client, login):
        response = client.put("/profile", json={"name": "  "}, headers=login())

        assert response.status_code == 422
        assert response.json()["message"] == "Profile name is required"

    def test_unknown_field_rejected(self, client, login):
        response = client.put("/profile", json={"id": "someone_else"}, headers=login())

        assert response.status_code == 422

    def test_requires_token(self, client):
        assert client.put("/profile", json={"bio": "hi"}).status_code == 401


class TestCatalog:
    def test_list_universities(self, client):
        body = client.get("/catalog/universities").json()

        assert body["total"] == 5
        assert body["results"][0]["verificationLevel"] == "strict"

    def test_filters(self, client):
        body = client.get(
            "/catalog/universities", params={"search": "kansai", "program": "economics"}
        ).json()

        assert [u["id"] for u in body["results"]] == ["osaka"]

    def test_limit_bounds(self, client):
        assert client.get("/catalog/universities", params={"limit": 51}).status_code == 422

    def test_configuration(self, client):
        body = client.get("/catalog/configuration").json()

        assert [p["id"] for p in body["weightPresets"]] == ["balanced", "major", "language"]
        assert body["weightPresets"][0]["isActive"] is True
        assert body["weightPresets"][0]["weights"] == {
            "interests": 0.5,
            "majors": 0.3,
            "languages": 0.2,
        }
        assert body["intents"][1]["radiusKm"] == 30
        assert len(body["verificationFlags"]) == 3


class TestMeta:
    def test_root(self, client):
        assert client.get("/").json() == {"message": "Matching App API is running"}

    def test_health(self, client):
        body = client.get("/healthz").json()

        assert body["status"] == "ok"
        assert body["profilesLoaded"] == 4
        assert body["universitiesLoaded"] == 5

    def test_request_id_header(self, client):
        generated = client.get("/")
        echoed = client.get("/", headers={"X-Request-ID": "trace-1"})

        assert generated.headers["x-request-id"]
        assert echoed.headers["x-request-id"] == "trace-1"

    def test_openapi_lists_bearer_scheme(self, client):
        schema = client.get("/openapi.json").json()

        assert "EmailOtpToken" in schema["components"]["securitySchemes"]
