"""Shared fixtures: in-memory SQLite database and an authenticated client."""

import os

# Settings are read when app.* is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

import pytest
from fastapi.testclient import TestClient

from app.core.database import SessionLocal, create_tables, drop_tables
from app.main import app


@pytest.fixture
def db():
    """Fresh schema per test."""
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


@pytest.fixture
def client(db):
    return TestClient(app)


def register_and_login(client: TestClient, email: str = "ana@example.com", **extra) -> dict:
    """Register a user and return bearer headers."""
    payload = {
        "email": email,
        "name": "Ana",
        "password": "secreto123",
        "confirm_password": "secreto123",
        **extra,
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text

    response = client.post(
        "/api/auth/login",
        data={"username": email, "password": "secreto123"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def medicine(client, auth_headers):
    response = client.post(
        "/api/medicines/",
        json={"name": "Metformin", "dosage": "500mg", "times": ["08:00", "20:00"]},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def login_as(client):
    """Factory: register another user and return its headers."""
    def _login(email: str, **extra) -> dict:
        return register_and_login(client, email, **extra)
    return _login
