"""Integration tests for health, readiness, metrics and request IDs"""

import pytest

pytestmark = pytest.mark.integration


class TestObservabilityEndpoints:

    def test_health(self, client):
        """Test healthy database and storage"""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert set(body["components"]) == {"database", "object_storage"}

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_metrics(self, client):
        """Test Prometheus exposition includes portal counters"""
        client.get("/api/v1/applications/nobody@example.com/status")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "portal_rejected_operations_total" in response.text

    def test_request_id_echoed(self, client):
        """Test a caller-supplied request ID is returned"""
        response = client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client):
        response = client.get("/")
        assert len(response.headers["X-Request-ID"]) == 36
