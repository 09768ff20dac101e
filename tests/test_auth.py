import pytest

from carebook.api.deps import get_redis
from carebook.core.config import settings
from carebook.core.security import DemoTokenVerifier, JWTTokenVerifier, UserRole
from carebook.main import app

from .conftest import login

# Test data
test_user_data = {
    "email": "test@example.com",
    "password": "TestPassword123",
    "role": "patient",
    "firstName": "Test",
    "lastName": "User"
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}

test_doctor_data = {
    "email": "new.doctor@example.com",
    "password": "DoctorPass123",
    "role": "doctor",
    "firstName": "Grace",
    "lastName": "Hopper",
    "specialization": "Neurology",
    "yearsOfExperience": 12,
    "consultationFee": 180
}

class FakeRedis:
    def __init__(self):
        self.counts = {}
        self.expiries = {}

    def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key, seconds):
        self.expiries[key] = seconds

class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["user"]["email"] == test_user_data["email"]
        assert data["user"]["role"] == test_user_data["role"]
        assert data["token"]
        assert "password" not in data["user"]

    def test_register_duplicate_email(self, client):
        """Test registration with duplicate email."""
        client.post("/api/v1/auth/register", json=test_user_data)

        duplicate = dict(test_user_data, email="TEST@example.com")
        response = client.post("/api/v1/auth/register", json=duplicate)
        assert response.status_code == 400
        assert "already exists" in response.json()["message"]

    def test_register_invalid_password(self, client):
        """Test registration with a too short password."""
        invalid_data = test_user_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_register_missing_fields(self, client):
        response = client.post("/api/v1/auth/register", json={"email": "x@example.com"})
        assert response.status_code == 400
        assert "firstName" in response.json()["message"]

    def test_register_without_password_uses_demo_password(self, client):
        data = {k: v for k, v in test_user_data.items() if k != "password"}
        client.post("/api/v1/auth/register", json=data)

        response = client.post(
            "/api/v1/auth/login",
            json={"email": test_user_data["email"], "password": settings.DEMO_PASSWORD}
        )
        assert response.status_code == 200

    def test_register_doctor_lists_in_directory(self, client):
        response = client.post("/api/v1/auth/register", json=test_doctor_data)
        assert response.status_code == 201
        doctor_id = response.json()["user"]["id"]

        response = client.get(f"/api/v1/doctors/{doctor_id}")
        assert response.status_code == 200
        doctor = response.json()["doctor"]
        assert doctor["name"] == "Dr. Grace Hopper"
        assert doctor["specialization"] == "Neurology"
        assert doctor["consultationFee"] == 180
        assert len(doctor["schedule"]) == 5

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert data["user"]["firstName"] == "Test"

    def test_login_email_is_case_insensitive(self, client):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "Patient@Demo.com", "password": "password123"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == "3"

    def test_login_invalid_credentials(self, client):
        """Test login with unknown email."""
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/v1/auth/login", json=invalid_login)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/v1/auth/register", json=test_user_data)

        wrong_login = test_login_data.copy()
        wrong_login["password"] = "wrongpassword"

        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_get_current_user(self, client):
        """Test getting current user info."""
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = login(client, test_login_data["email"], test_login_data["password"])

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["user"]["email"] == test_user_data["email"]

    def test_get_current_user_without_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "No token provided or invalid format"

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, patient_headers):
        response = client.post("/api/v1/auth/logout", headers=patient_headers)
        assert response.status_code == 200

        response = client.get("/api/v1/auth/me", headers=patient_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Token has been revoked"

    def test_verify_token(self, client, doctor_headers):
        """Test token verification."""
        response = client.post("/api/v1/auth/verify-token", headers=doctor_headers)
        assert response.status_code == 200

        data = response.json()
        assert data["valid"] is True
        assert data["userId"] == "1"
        assert data["role"] == "doctor"
        assert data["expires"]

class TestTokenVerifiers:

    def test_jwt_round_trip(self):
        verifier = JWTTokenVerifier("secret")
        token = verifier.issue("42", "a@example.com", UserRole.PATIENT)

        payload = verifier.verify(token)
        assert payload.sub == "42"
        assert payload.role == "patient"
        assert payload.jti

    def test_jwt_rejects_other_secret(self):
        token = JWTTokenVerifier("secret").issue("42", "a@example.com", UserRole.PATIENT)
        assert JWTTokenVerifier("other").verify(token) is None

    def test_demo_tokens(self):
        verifier = DemoTokenVerifier()
        token = verifier.issue("3", "patient@demo.com", UserRole.PATIENT)

        assert token == "demo-jwt-token-3"
        assert verifier.verify(token).sub == "3"
        assert verifier.verify("demo-jwt-token-") is None
        assert verifier.verify("something-else") is None

class TestRateLimiting:

    @pytest.fixture
    def fake_redis(self, monkeypatch):
        redis = FakeRedis()
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)
        app.dependency_overrides[get_redis] = lambda: redis
        return redis

    def test_login_is_rate_limited(self, client, fake_redis):
        credentials = {"email": "patient@demo.com", "password": "password123"}

        assert client.post("/api/v1/auth/login", json=credentials).status_code == 200
        assert client.post("/api/v1/auth/login", json=credentials).status_code == 200

        response = client.post("/api/v1/auth/login", json=credentials)
        assert response.status_code == 429
        assert response.json()["error"] == "Too many requests"
        assert list(fake_redis.expiries.values()) == [settings.RATE_LIMIT_WINDOW_SECONDS]
