"""Shared pytest fixtures for API tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from stock_api.main import create_app
from stock_api.settings import Settings
from stock_core.data_repository import Database
from stock_core.repositories import stock_movements as movement_repository

TEST_SECRET = "test-secret-key-with-at-least-32-characters"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app_env="test",
        database_url="sqlite://",
        cors_allowed_origins=["http://localhost:5173"],
        jwt_secret_keys=[TEST_SECRET],
        auto_create_schema=True,
    )


@pytest.fixture
def api_db() -> Database:
    database = Database.from_url("sqlite://")
    yield database
    database.dispose()


@pytest.fixture
def app(settings, api_db):
    return create_app(settings=settings, database=api_db)


@pytest.fixture
def client(app) -> TestClient:
    """TestClient running the app lifespan, so the schema exists."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register an account through the API and return the {user, token} body."""

    def _register(email: str = "ada@example.com", password: str = "correct horse", name: str = "Ada") -> dict:
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register) -> dict[str, str]:
    token = register()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def ticking_clock(monkeypatch):
    """Stamp each recorded movement one second after the previous one."""
    ticks = itertools.count()
    start = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(movement_repository, "utcnow", lambda: start + timedelta(seconds=next(ticks)))
