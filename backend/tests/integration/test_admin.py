"""
tests/integration/test_admin.py — health check, metrics, reset and /app hits.

Endpoints covered:
  GET  /api/healthz
  GET  /admin/metrics
  POST /admin/reset
  GET  /app/<path>
"""

from __future__ import annotations

import pytest

from .conftest import make_chirp, register_and_login


@pytest.fixture
def site_root(app, tmp_path, monkeypatch):
    """Points the /app file server at a throwaway directory."""
    (tmp_path / "index.html").write_text("<h1>Welcome to Chirpy</h1>")
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "logo.txt").write_text("logo")
    monkeypatch.setitem(app.config, "FILESERVER_ROOT", str(tmp_path))
    return tmp_path


def _hits(client) -> str:
    return client.get("/admin/metrics").get_data(as_text=True)


class TestHealth:

    def test_healthz(self, client):
        resp = client.get("/api/healthz")
        assert resp.status_code == 200
        assert resp.get_data(as_text=True) == "OK"
        assert resp.mimetype == "text/plain"


class TestFileServerAndMetrics:

    def test_metrics_page_starts_at_zero(self, client):
        resp = client.get("/admin/metrics")
        assert resp.status_code == 200
        assert resp.mimetype == "text/html"
        body = resp.get_data(as_text=True)
        assert "Welcome, Chirpy Admin" in body
        assert "Chirpy has been visited 0 times!" in body

    def test_app_requests_are_counted(self, client, site_root):
        assert client.get("/app/").status_code == 200
        assert client.get("/app/assets/logo.txt").get_data(as_text=True) == "logo"
        assert "visited 2 times!" in _hits(client)

    def test_missing_file_is_still_counted(self, client, site_root):
        assert client.get("/app/nope.html").status_code == 404
        assert "visited 1 times!" in _hits(client)

    def test_api_requests_are_not_counted(self, client, site_root):
        client.get("/api/healthz")
        client.get("/api/chirps")
        assert "visited 0 times!" in _hits(client)


class TestReset:

    def test_reset_clears_hits_and_users(self, client, site_root):
        alice = register_and_login(client)
        make_chirp(client, alice["token"])
        client.get("/app/")

        resp = client.post("/admin/reset")
        assert resp.status_code == 200
        assert resp.get_data(as_text=True) == "OK"

        assert "visited 0 times!" in _hits(client)
        assert client.get("/api/chirps").get_json() == []
        resp = client.post("/api/login", json={
            "email": "alice@test.com", "password": "Password1",
        })
        assert resp.status_code == 401

        # the email is free again
        register_and_login(client)

    def test_reset_outside_dev_is_forbidden(self, client, app, monkeypatch):
        alice = register_and_login(client)
        monkeypatch.setitem(app.config, "PLATFORM", "production")

        resp = client.post("/admin/reset")
        assert resp.status_code == 403
        assert resp.get_data(as_text=True) == "Forbidden"

        # nothing was deleted
        assert client.post("/api/login", json={
            "email": alice["email"], "password": "Password1",
        }).status_code == 200
