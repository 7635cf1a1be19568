"""Shared fixtures: a fresh app and in-memory store per test."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from rootpilot.infrastructure.database import Storage
from rootpilot.main import create_app
from rootpilot.services.analysis_engine import MockAnalysisEngine


PUMP_TRIP = {
    "title": "Pump Trip",
    "description": "Unexpected pump trip at 14:02",
    "incidentDate": "2024-01-15T14:02:00Z",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def app():
    return create_app(
        storage=Storage("sqlite+aiosqlite:///:memory:"),
        analysis_engine=MockAnalysisEngine(seed=42),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    def _register(email="alice@example.com", password="pw123456", name="Alice"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register


@pytest.fixture
def alice(register):
    return register("alice@example.com", "pw123456", "Alice")


@pytest.fixture
def bob(register):
    return register("bob@example.com", "hunter22", "Bob")


@pytest.fixture
def create_incident(client):
    def _create(user, **overrides):
        payload = {**PUMP_TRIP, **overrides}
        response = client.post("/api/incidents", json=payload, headers=user["headers"])
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
async def storage():
    store = Storage("sqlite+aiosqlite:///:memory:")
    await store.init()
    yield store
    await store.dispose()


@pytest.fixture
async def session(storage):
    async with storage.session() as db:
        yield db
