"""
Shared fixtures: every test gets a fresh app over its own SQLite file.
"""

import pytest
from fastapi.testclient import TestClient

from msgboard.config import Settings
from msgboard.main import create_app

TEST_SECRET = "test-secret-key"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        session_secret_key=TEST_SECRET,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """First browser. Entering the context runs startup, creating the tables."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def new_client(app, client):
    """Factory for additional browsers, each with its own cookie jar."""
    extra = []

    def factory():
        test_client = TestClient(app)
        extra.append(test_client)
        return test_client

    yield factory

    for test_client in extra:
        test_client.close()


@pytest.fixture
def login_as():
    """Register (if needed) and log in on the given client."""
    def _login(test_client, username, password="pw123"):
        test_client.post("/register", json={"username": username, "password": password})
        response = test_client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200
        return response.json()

    return _login
