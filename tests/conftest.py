"""
tests/conftest.py -- Shared test fixtures for DevConnector integration tests.

This module provides:
  - make_settings(): Settings pointing at an isolated in-memory database
  - client: TestClient over a fresh app (one per test module)
  - lenient_client: same, but 500s come back as responses instead of raising
  - new_user: factory that registers a user and returns (token, user_id)
  - auth_headers, secret: token helpers for hand-built requests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each fixture uses a unique name so modules never see each other's data.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import create_app
from core.config import Settings

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"

NewUser = Callable[..., tuple[str, str]]


def make_settings(**overrides) -> Settings:
    """Settings with a fixed secret and a private shared-memory database."""
    values = {
        "debug": True,
        "secret_key": TEST_SECRET,
        "database_url": f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true",
        "github_token": "",
        "environment": "test",
    }
    values.update(overrides)
    return Settings(**values)


def _auth_headers(token: str) -> dict[str, str]:
    return {"x-auth-token": token}


@pytest.fixture
def auth_headers():
    """Return a helper: auth_headers(token) -> request headers carrying the token."""
    return _auth_headers


@pytest.fixture(scope="session")
def settings_factory() -> Callable[..., Settings]:
    """Return make_settings, for tests that need a differently configured app."""
    return make_settings


@pytest.fixture
def secret() -> str:
    """The signing secret the test app is configured with."""
    return TEST_SECRET


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    """TestClient over a real app with an isolated database.

    The rate limiter is process-global, so its counters are reset to keep
    login tests in one module from throttling another.
    """
    limiter.reset()
    app = create_app(make_settings())
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="module")
def lenient_client() -> Generator[TestClient, None, None]:
    """Like client, but unhandled exceptions surface as 500 responses."""
    app = create_app(make_settings())
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def _register(c: TestClient, name: str = "Ada Lovelace", email: str | None = None, password: str = "secret123"):
    email = email or f"user-{uuid.uuid4().hex[:12]}@example.com"
    resp = c.post("/api/users", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 200, resp.text
    token = resp.json()["token"]
    me = c.get("/api/auth", headers=_auth_headers(token))
    assert me.status_code == 200, me.text
    return token, me.json()["id"]


@pytest.fixture
def new_user(client: TestClient) -> NewUser:
    """Return a factory: new_user(name=..., email=..., password=...) -> (token, user_id)."""

    def factory(**kwargs) -> tuple[str, str]:
        return _register(client, **kwargs)

    return factory
