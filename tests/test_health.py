"""
tests/test_health.py -- Smoke tests for the top-level endpoints and the error envelope.

Covers:
  - GET / and GET /api/health
  - baseline security headers
  - envelope for framework 404s, storage failures, and unhandled exceptions
  - internal detail only rendered in DEBUG mode
  - 429 envelope with Retry-After, for the default limit and the login limit
"""

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from core.config import get_settings
from core.errors import StorageError


class TestTopLevel:
    def test_home_greeting(self, api_client):
        client, _, _ = api_client
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "Welcome to the CAR-RENTAL Backend API!"

    def test_health_reports_database(self, api_client):
        client, _, _ = api_client
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["components"] == {"app": "ok", "database": "ok"}
        assert body["version"]

    def test_security_headers_present(self, api_client):
        client, _, _ = api_client
        resp = client.get("/api/health")
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["x-frame-options"] == "DENY"

    def test_unknown_route_uses_error_envelope(self, api_client):
        client, _, _ = api_client
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == "http_404"


# ===========================================================================
# Server errors
# ===========================================================================


def _failing_list(exc: Exception):
    def fail():
        raise exc

    return fail


class TestServerErrors:
    def test_storage_error_is_500_with_detail_in_debug(self, api_client, monkeypatch):
        client, _, _ = api_client
        monkeypatch.setattr(get_settings(), "debug", True)
        monkeypatch.setattr(
            client.app.state.inventory, "list", _failing_list(StorageError("Server error", detail="list cars: disk I/O"))
        )
        resp = client.get("/api/car/all")
        assert resp.status_code == 500
        body = resp.json()
        assert body == {
            "success": False,
            "code": "storage_error",
            "message": "Server error",
            "detail": "list cars: disk I/O",
        }

    def test_detail_is_hidden_outside_debug(self, api_client, monkeypatch):
        client, _, _ = api_client
        monkeypatch.setattr(get_settings(), "debug", False)
        monkeypatch.setattr(
            client.app.state.inventory, "list", _failing_list(StorageError("Server error", detail="list cars: disk I/O"))
        )
        resp = client.get("/api/car/all")
        assert resp.status_code == 500
        assert "detail" not in resp.json()
        assert "disk I/O" not in resp.text

    def test_unhandled_exception_is_generic_500(self, api_client, monkeypatch):
        client, _, _ = api_client
        monkeypatch.setattr(get_settings(), "debug", False)
        monkeypatch.setattr(client.app.state.inventory, "list", _failing_list(RuntimeError("secret internals")))
        # No context manager: app.state is already populated by api_client.
        quiet = TestClient(client.app, raise_server_exceptions=False)
        resp = quiet.get("/api/car/all")
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "code": "internal_error", "message": "Internal server error"}
        assert "secret internals" not in resp.text


# ===========================================================================
# Rate limiting
# ===========================================================================


@pytest.fixture
def rate_limited(monkeypatch):
    """Turn the shared limiter on for one test with clean counters."""
    limiter.reset()
    monkeypatch.setattr(limiter, "enabled", True)
    yield limiter
    limiter.reset()


class TestRateLimit:
    def test_default_limit_returns_429_envelope(self, api_client, rate_limited):
        client, _, _ = api_client
        statuses = [client.get("/").status_code for _ in range(101)]
        assert statuses[:100] == [200] * 100
        assert statuses[100] == 429

        resp = client.get("/")
        assert resp.status_code == 429
        assert resp.json()["code"] == "rate_limited"
        assert resp.json()["success"] is False
        assert int(resp.headers["retry-after"]) >= 0

    def test_health_is_exempt(self, api_client, rate_limited):
        client, _, _ = api_client
        assert all(client.get("/api/health").status_code == 200 for _ in range(105))

    def test_login_limit_applies(self, api_client, rate_limited):
        client, _, _ = api_client
        creds = {"email": "testuser@example.com", "password": "wrong-password"}
        statuses = [client.post("/login", json=creds).status_code for _ in range(11)]
        assert statuses[:10] == [401] * 10
        assert statuses[10] == 429
        assert "retry-after" in client.post("/login", json=creds).headers
