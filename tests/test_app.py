import pytest
from fastapi.testclient import TestClient

from carebook.core.store import get_store
from carebook.main import app

class TestApplication:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_info(self, client):
        response = client.get("/api/v1/info")
        assert response.json()["endpoints"]["appointments"] == "/api/v1/appointments"

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"

    def test_method_not_allowed(self, client):
        response = client.patch("/api/v1/doctors")
        assert response.status_code == 405
        assert "message" in response.json()

class TestUnexpectedErrors:

    @pytest.fixture
    def failing_client(self):
        def broken_store():
            raise RuntimeError("store offline")

        app.dependency_overrides[get_store] = broken_store
        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client
        app.dependency_overrides.clear()

    def test_internal_error_body(self, failing_client):
        response = failing_client.get("/api/v1/doctors")
        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
