"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing"), which
    points at in-memory SQLite unless TEST_DATABASE_URL says otherwise.
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated,
    and the hit counter is zeroed.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)    → user dict
  - login(client, ...)       → user dict with token + refresh_token
  - auth_headers(token)      → {"Authorization": "Bearer <token>"}
  - api_key_headers(key)     → {"Authorization": "ApiKey <key>"}
  - make_chirp(client, ...)  → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test.
"""

from __future__ import annotations

import pytest

from backend.app import create_app
from backend.app.extensions import db as _db
from backend.app.services.metrics_service import get_hit_counter

DEFAULT_PASSWORD = "Password1"


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test
    session, creates all tables, and drops them at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows after every test, children before parents, and resets
    the hit counter.
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        from sqlalchemy import text
        with _db.engine.connect() as conn:
            conn.execute(text("DELETE FROM refresh_tokens"))
            conn.execute(text("DELETE FROM chirps"))
            conn.execute(text("DELETE FROM users"))
            conn.commit()

        get_hit_counter().reset()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def register(
    client,
    email: str = "alice@test.com",
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """Registers a new user and returns the user dict."""
    resp = client.post(
        "/api/users",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()


def login(
    client,
    email: str = "alice@test.com",
    password: str = DEFAULT_PASSWORD,
    expires_in_seconds: int | None = None,
) -> dict:
    """Logs a user in and returns the user dict with token and refresh_token."""
    payload: dict = {"email": email, "password": password}
    if expires_in_seconds is not None:
        payload["expires_in_seconds"] = expires_in_seconds
    resp = client.post("/api/login", json=payload)
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()


def register_and_login(client, email: str = "alice@test.com") -> dict:
    register(client, email)
    return login(client, email)


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def api_key_headers(key: str) -> dict:
    return {"Authorization": f"ApiKey {key}"}


def make_chirp(client, token: str, body: str = "Hello, world!"):
    """Creates a chirp and returns the HTTP response."""
    return client.post(
        "/api/chirps",
        json={"body": body},
        headers=auth_headers(token),
    )
