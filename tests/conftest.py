from datetime import date

import pytest
from fastapi.testclient import TestClient

from carebook.api.deps import get_today
from carebook.core.seed import seed_demo_data
from carebook.core.store import Repository, get_store
from carebook.main import app

# Monday; the next day has the default 09:00-17:00 schedule
TODAY = date(2024, 1, 15)

DEMO_PASSWORD = "password123"

@pytest.fixture
def store():
    repository = Repository()
    seed_demo_data(repository)
    return repository

@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()

def login(client, email, password=DEMO_PASSWORD):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}

@pytest.fixture
def patient_headers(client):
    return login(client, "patient@demo.com")

@pytest.fixture
def doctor_headers(client):
    return login(client, "doctor@demo.com")

@pytest.fixture
def other_doctor_headers(client):
    return login(client, "michael.williams@demo.com")
