"""
tests/test_auth_routes.py -- Integration tests for signup, login, and the auth gate.

Covers:
  - POST /signup: 201 + token, role from email domain, duplicate 409, validation 400
  - POST /login and its /api/user/login alias: success, uniform 401 on bad credentials
  - POST /api/admin/signup and /api/admin/login: admin-domain enforcement
  - GET /api/protected: 401 without token, 403 with a bad one, 200 with a good one
"""

from datetime import timedelta

import pytest

from auth.models import ROLE_USER
from auth.tokens import create_access_token, decode_access_token


def _signup(client, email: str, password: str = "secret123", name: str = "Jane", path: str = "/signup"):
    return client.post(path, json={"name": name, "email": email, "password": password})


# ===========================================================================
# User signup
# ===========================================================================


class TestSignup:
    def test_signup_returns_token_and_user_role(self, api_client):
        client, _, _ = api_client
        resp = _signup(client, "jane@example.com")
        assert resp.status_code == 201
        assert resp.headers["cache-control"] == "no-store"
        body = resp.json()
        assert body["success"] is True
        assert body["role"] == "user"
        assert body["user"]["email"] == "jane@example.com"
        assert "password" not in body["user"]
        assert "hashedPassword" not in body["user"]
        claims = decode_access_token(body["token"])
        assert claims.role == "user"
        assert claims.subject_id == body["user"]["id"]

    def test_admin_domain_signup_gets_admin_role(self, api_client):
        client, _, _ = api_client
        resp = _signup(client, "boss@admin.com")
        assert resp.status_code == 201
        assert resp.json()["role"] == "admin"
        assert decode_access_token(resp.json()["token"]).role == "admin"

    def test_duplicate_email_is_409(self, api_client):
        client, _, _ = api_client
        assert _signup(client, "dup@example.com").status_code == 201
        resp = _signup(client, "dup@example.com")
        assert resp.status_code == 409
        assert resp.json()["success"] is False

    def test_duplicate_check_ignores_case(self, api_client):
        client, _, _ = api_client
        assert _signup(client, "mixed@example.com").status_code == 201
        assert _signup(client, "  MIXED@Example.com ").status_code == 409

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "x@example.com", "password": "secret123"},
            {"name": "X", "password": "secret123"},
            {"name": "X", "email": "x@example.com"},
            {"name": "X", "email": "not-an-email", "password": "secret123"},
            {"name": "X", "email": "x@example.com", "password": "short"},
            {"name": "", "email": "x@example.com", "password": "secret123"},
        ],
    )
    def test_invalid_signup_is_400(self, api_client, body):
        client, _, _ = api_client
        resp = client.post("/signup", json=body)
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_user_prefix_alias(self, api_client):
        client, _, _ = api_client
        resp = _signup(client, "alias@example.com", path="/api/user/signup")
        assert resp.status_code == 201


# ===========================================================================
# User login
# ===========================================================================


class TestLogin:
    def test_login_success(self, api_client):
        client, _, _ = api_client
        resp = client.post("/login", json={"email": "testuser@example.com", "password": "testpass123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["role"] == "user"
        assert body["name"] == "Test User"
        assert decode_access_token(body["token"]) is not None

    def test_login_through_user_prefix(self, api_client):
        client, _, _ = api_client
        resp = client.post("/api/user/login", json={"email": "testuser@example.com", "password": "testpass123"})
        assert resp.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, api_client):
        client, _, _ = api_client
        wrong_pw = client.post("/login", json={"email": "testuser@example.com", "password": "nope"})
        unknown = client.post("/login", json={"email": "ghost@example.com", "password": "testpass123"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()

    def test_login_email_is_case_insensitive(self, api_client):
        client, _, _ = api_client
        resp = client.post("/login", json={"email": "TestUser@Example.COM", "password": "testpass123"})
        assert resp.status_code == 200


# ===========================================================================
# Admin signup and login
# ===========================================================================


class TestAdmin:
    def test_admin_signup_then_login(self, api_client):
        client, _, _ = api_client
        resp = _signup(client, "chief@admin.com", path="/api/admin/signup")
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Admin registered successfully"
        assert body["role"] == "admin"
        assert "token" not in body

        resp = client.post("/api/admin/login", json={"email": "chief@admin.com", "password": "secret123"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"
        assert decode_access_token(resp.json()["token"]).role == "admin"

    def test_admin_signup_rejects_non_admin_email(self, api_client):
        client, _, _ = api_client
        resp = _signup(client, "jane2@example.com", path="/api/admin/signup")
        assert resp.status_code == 400
        assert "@admin.com" in resp.json()["message"]

    def test_admin_signup_duplicate_is_409(self, api_client):
        client, _, _ = api_client
        assert _signup(client, "twice@admin.com", path="/api/admin/signup").status_code == 201
        assert _signup(client, "twice@admin.com", path="/api/admin/signup").status_code == 409

    def test_admin_login_with_non_admin_email_is_403(self, api_client):
        client, _, _ = api_client
        resp = client.post("/api/admin/login", json={"email": "testuser@example.com", "password": "testpass123"})
        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied: Not an admin email"

    def test_admin_login_wrong_password_is_401(self, api_client):
        client, _, _ = api_client
        _signup(client, "wrongpw@admin.com", path="/api/admin/signup")
        resp = client.post("/api/admin/login", json={"email": "wrongpw@admin.com", "password": "nope"})
        assert resp.status_code == 401


# ===========================================================================
# Authorization gate
# ===========================================================================


class TestProtected:
    def test_no_token_is_401(self, api_client):
        client, _, _ = api_client
        resp = client.get("/api/protected")
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthenticated"

    @pytest.mark.parametrize("header", ["Bearer garbage", "Bearer a.b.c"])
    def test_invalid_token_is_403(self, api_client, header):
        client, _, _ = api_client
        resp = client.get("/api/protected", headers={"Authorization": header})
        assert resp.status_code == 403
        assert resp.json()["code"] == "invalid_token"

    def test_non_bearer_scheme_is_401(self, api_client):
        client, token, _ = api_client
        resp = client.get("/api/protected", headers={"Authorization": f"Basic {token}"})
        assert resp.status_code == 401

    def test_expired_token_is_403(self, api_client):
        client, _, _ = api_client
        expired = create_access_token("someone", ROLE_USER, expires_delta=timedelta(seconds=-1))
        resp = client.get("/api/protected", headers={"Authorization": f"Bearer {expired}"})
        assert resp.status_code == 403

    def test_valid_token_echoes_principal(self, api_client):
        client, token, _ = api_client
        resp = client.get("/api/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        principal = resp.json()["principal"]
        assert principal["role"] == "user"
        assert principal["subjectId"] == decode_access_token(token).subject_id
