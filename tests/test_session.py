# =============================================================================
# tests/test_session.py - Session Cookie Tests
# =============================================================================
# Tests for:
# - Cookie attributes (Secure, SameSite=None, 24h, HttpOnly)
# - Session established at login authenticates later requests
# - Logout clears the session
# - Role changes and deletions apply to existing sessions
# =============================================================================

from unittest.mock import AsyncMock, patch

import pytest
from bson import ObjectId

from app.auth.security import hash_password
from app.exceptions import DatabaseUnavailableError, DocumentNotFoundError
from core.services.user_service import UserService

from tests.conftest import USER_ID

PASSWORD = "rahasia123"


@pytest.fixture
def stored_user():
    """Raw users document, as find_by_email returns it."""
    return {
        "_id": ObjectId(USER_ID),
        "email": "sari@example.com",
        "name": "Sari",
        "role": "user",
        "provider": "local",
        "password_hash": hash_password(PASSWORD),
        "google_id": None,
        "avatar_url": None,
    }


def login_as(client, document):
    with patch.object(UserService, "find_by_email", new=AsyncMock(return_value=document)):
        response = client.post("/api/auth/login", json={"email": document["email"], "password": PASSWORD})
    assert response.status_code == 200
    return response


@pytest.fixture
def logged_in(client, stored_user):
    """Client holding a session cookie for stored_user."""
    return login_as(client, stored_user)


class TestSessionCookie:

    def test_cookie_attributes(self, logged_in):
        cookie = logged_in.headers["set-cookie"].lower()

        assert cookie.startswith("session=")
        assert "max-age=86400" in cookie
        assert "samesite=none" in cookie
        assert "secure" in cookie
        assert "httponly" in cookie
        assert "path=/" in cookie

    def test_no_cookie_for_untouched_session(self, client):
        assert "set-cookie" not in client.get("/").headers
        assert "set-cookie" not in client.get("/api/diag").headers

    def test_login_never_returns_password_hash(self, logged_in):
        body = logged_in.json()

        assert body["user"]["id"] == USER_ID
        assert "password_hash" not in body["user"]
        assert body["access_token"]
        assert body["token_type"] == "bearer"


class TestSessionAuthentication:

    def test_session_identifies_user(self, client, logged_in, sample_user):
        with patch.object(UserService, "get_user", new=AsyncMock(return_value=sample_user)) as get_user:
            response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["email"] == "sari@example.com"
        get_user.assert_awaited_with(USER_ID)

    def test_me_falls_back_to_session_without_database(self, client, logged_in):
        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=DatabaseUnavailableError())):
            response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["id"] == USER_ID
        assert response.json()["name"] == "Sari"

    def test_anonymous_me_is_401(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_REQUIRED"

    def test_tampered_cookie_is_anonymous(self, client):
        response = client.get("/api/auth/me", headers={"Cookie": "session=not-a-signed-value"})

        assert response.status_code == 401

    def test_logout_clears_session(self, client, logged_in):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_when_anonymous(self, client):
        assert client.post("/api/auth/logout").status_code == 200


class TestSessionReload:
    """The session holds who logged in; the users collection decides what they may do."""

    def test_demoted_admin_loses_access(self, client, stored_user, sample_user):
        login_as(client, {**stored_user, "role": "admin"})

        with patch.object(UserService, "list_users", new=AsyncMock(return_value=[])):
            with patch.object(UserService, "get_user", new=AsyncMock(return_value={**sample_user, "role": "admin"})):
                assert client.get("/api/users").status_code == 200

            with patch.object(UserService, "get_user", new=AsyncMock(return_value=sample_user)):
                response = client.get("/api/users")

        assert response.status_code == 403
        assert "session=" in response.headers["set-cookie"]

    def test_demotion_is_written_back_to_session(self, client, stored_user, sample_user):
        login_as(client, {**stored_user, "role": "admin"})

        with patch.object(UserService, "get_user", new=AsyncMock(return_value=sample_user)):
            client.get("/api/auth/me")

        # Database down: the refreshed session principal is used
        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=DatabaseUnavailableError())):
            assert client.get("/api/users").status_code == 403
            assert client.get("/api/auth/me").json()["role"] == "user"

    def test_deleted_user_is_logged_out(self, client, logged_in):
        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=DocumentNotFoundError("users", USER_ID))):
            assert client.get("/api/auth/me").status_code == 401

        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=DatabaseUnavailableError())):
            assert client.get("/api/auth/me").status_code == 401
