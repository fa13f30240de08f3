"""
Tests for API health and basic endpoints.
"""

import pytest
from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Test basic health and status endpoints"""

    @pytest.mark.unit
    def test_root_endpoint(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Adaptive Quiz Learner API"
        assert "version" in data

    @pytest.mark.unit
    def test_health_check(self, client: TestClient):
        """Health reports the AI circuit alongside the API"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["ai_service"] in ("healthy", "degraded")

    @pytest.mark.unit
    def test_openapi_lists_every_router(self, client: TestClient):
        response = client.get("/openapi.json")
        assert response.status_code == 200
        paths = response.json()["paths"]
        for path in ("/api/auth/login", "/api/quiz/start", "/api/user/profile", "/api/admin/statistics"):
            assert path in paths

    @pytest.mark.unit
    def test_unknown_route_uses_error_envelope(self, client: TestClient):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["success"] is False
