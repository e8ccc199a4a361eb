"""Tests for health and readiness endpoints.

These endpoints make no LLM calls, so they are fast and always safe to run.
"""

from api.config import get_settings


class TestHealthEndpoint:
    def test_returns_200(self, api_client):
        resp = api_client.get("/health")
        assert resp.status_code == 200

    def test_status_is_healthy(self, api_client):
        body = api_client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["version"]
        assert "timestamp" in body

    def test_reports_models(self, api_client):
        body = api_client.get("/health").json()
        assert body["llm_provider"] == "openai"
        assert body["detection_model"] == get_settings().openai_model
        assert body["image_model"] == get_settings().openai_image_model


class TestLivenessEndpoint:
    def test_status_is_alive(self, api_client):
        resp = api_client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json()["status"] == "alive"


class TestReadinessEndpoint:
    def test_ready_with_api_key(self, api_client):
        resp = api_client.get("/readyz")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ready"
        assert body["checks"]["filesystem"] == "ok"

    def test_not_ready_without_api_key(self, api_client, monkeypatch):
        monkeypatch.setattr(get_settings(), "openai_api_key", "")
        resp = api_client.get("/readyz")
        assert resp.status_code == 503
        assert resp.json()["checks"]["llm_config"].startswith("error")


class TestRequestId:
    def test_request_id_echoed(self, api_client):
        resp = api_client.get("/healthz", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"

    def test_request_id_generated(self, api_client):
        assert api_client.get("/healthz").headers["X-Request-ID"]
