"""Integration tests for the HTTP surface.

The lifespan is not entered (no ``with TestClient``), so no scheduler starts
and the container comes from a dependency override.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_container
from src.api.main import app
from src.config.settings import get_settings
from src.core.container import DependencyContainer


@pytest.fixture
def client(services, make_settings):
    settings = make_settings()
    http = httpx.AsyncClient(transport=httpx.MockTransport(services.handler))
    container = DependencyContainer(settings, http_client=http)

    app.dependency_overrides[get_container] = lambda: container
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRunEndpoints:
    """Manual triggers return the RunOutcome envelope."""

    def test_collect_success(self, client, services):
        response = client.post("/api/v1/runs/collect")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["job"] == "collect"
        assert body["data"]["new_items_delivered"] == 4
        assert len(services.slack_posts) == 1

    def test_collect_failure_returns_500(self, client, services):
        services.slack_error = "not_in_channel"

        response = client.post("/api/v1/runs/collect")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "DeliveryError"

    def test_digest_after_collect(self, client, services):
        client.post("/api/v1/runs/collect")

        response = client.post("/api/v1/runs/digest")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["posts_count"] == 4
        assert data["posted"] is True
        assert len(services.slack_posts) == 2


class TestHealthEndpoints:
    """Health, readiness and metrics."""

    def test_liveness(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_health_reports_each_dependency(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert set(body["services"]) == {"dedup_store", "configuration", "scheduler"}
        assert body["services"]["dedup_store"]["status"] == "degraded"
        assert body["services"]["configuration"]["status"] == "healthy"
        assert body["status"] == "degraded"

    def test_readiness_requires_credentials(self, client, make_settings):
        app.dependency_overrides[get_settings] = lambda: make_settings(slack_bot_token=None)

        response = client.get("/health/ready")

        assert response.status_code == 503

    def test_metrics_exposes_run_counters(self, client):
        client.post("/api/v1/runs/collect")

        response = client.get("/metrics/")

        assert response.status_code == 200
        assert "aiinsights_run_total" in response.text
        assert "aiinsights_items_delivered_total" in response.text


class TestAPIKey:
    """X-API-Key enforcement, driven by environment settings."""

    @pytest.fixture
    def secured(self, monkeypatch):
        monkeypatch.setenv("API_KEY_ENABLED", "true")
        monkeypatch.setenv("API_KEY", "s3cret")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_missing_key_rejected(self, client, secured):
        response = client.post("/api/v1/runs/digest")

        assert response.status_code == 401
        assert response.json()["error"] == "Missing X-API-Key header"

    def test_wrong_key_rejected(self, client, secured):
        response = client.post("/api/v1/runs/digest", headers={"X-API-Key": "nope"})

        assert response.status_code == 401

    def test_public_paths_open(self, client, secured):
        assert client.get("/health/live").status_code == 200

    def test_valid_key_accepted(self, client, secured):
        response = client.post("/api/v1/runs/digest", headers={"X-API-Key": "s3cret"})

        assert response.status_code == 200
        assert response.json()["data"]["posted"] is False
