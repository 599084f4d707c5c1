# =============================================================================
# tests/test_auth.py - Authentication Tests
# =============================================================================
# Tests for:
# - Password hashing and bearer tokens
# - Register / login routes
# - Bearer authentication and role checks
# - Google sign-in (redirect, callback, provider calls)
# =============================================================================

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import JWTError

from app.auth.models import AuthUser
from app.auth.oauth import (
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    GoogleProfile,
    build_authorization_url,
    exchange_code,
    fetch_google_profile,
)
from app.auth.security import create_access_token, decode_access_token, hash_password, verify_password
from app.exceptions import (
    DatabaseUnavailableError,
    DocumentNotFoundError,
    EmailAlreadyRegisteredError,
    OAuthExchangeError,
)
from app.main import create_app
from core.models.user import UserRole
from core.services.user_service import UserService

from tests.conftest import ADMIN_ID, TEST_JWT_SECRET, USER_ID, bearer_for


# =============================================================================
# Passwords & Tokens
# =============================================================================

class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("rahasia123")

        assert hashed != "rahasia123"
        assert verify_password("rahasia123", hashed)
        assert not verify_password("salah", hashed)

    def test_account_without_password(self):
        """Google-only accounts have no hash and can't log in with one."""
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")


class TestTokens:

    def test_roundtrip(self):
        user = AuthUser(id=USER_ID, email="sari@example.com", name="Sari", role=UserRole.APPROVER)

        decoded = decode_access_token(create_access_token(user, TEST_JWT_SECRET, 60), TEST_JWT_SECRET)

        assert decoded == user

    def test_wrong_secret(self):
        token = create_access_token(AuthUser(id=USER_ID), TEST_JWT_SECRET, 60)

        with pytest.raises(JWTError):
            decode_access_token(token, "other-secret")

    def test_expired(self):
        token = create_access_token(AuthUser(id=USER_ID), TEST_JWT_SECRET, -5)

        with pytest.raises(JWTError):
            decode_access_token(token, TEST_JWT_SECRET)


# =============================================================================
# Register / Login
# =============================================================================

class TestRegister:

    def test_register_logs_in(self, client, sample_user):
        with patch.object(UserService, "create_user", new=AsyncMock(return_value=sample_user)) as create:
            response = client.post("/api/auth/register", json={
                "name": "Sari",
                "email": "sari@example.com",
                "password": "rahasia123",
            })

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "sari@example.com"
        assert "session=" in response.headers["set-cookie"]

        kwargs = create.await_args.kwargs
        assert kwargs["email"] == "sari@example.com"
        assert verify_password("rahasia123", kwargs["password_hash"])

    def test_duplicate_email(self, client):
        error = EmailAlreadyRegisteredError("sari@example.com")
        with patch.object(UserService, "create_user", new=AsyncMock(side_effect=error)):
            response = client.post("/api/auth/register", json={
                "name": "Sari",
                "email": "sari@example.com",
                "password": "rahasia123",
            })

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    def test_short_password_rejected(self, client):
        response = client.post("/api/auth/register", json={
            "name": "Sari",
            "email": "sari@example.com",
            "password": "123",
        })

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestLogin:

    def test_unknown_email(self, client):
        with patch.object(UserService, "find_by_email", new=AsyncMock(return_value=None)):
            response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_wrong_password(self, client):
        document = {"_id": USER_ID, "email": "sari@example.com", "name": "Sari", "password_hash": hash_password("benar")}
        with patch.object(UserService, "find_by_email", new=AsyncMock(return_value=document)):
            response = client.post("/api/auth/login", json={"email": "sari@example.com", "password": "salah"})

        assert response.status_code == 401
        assert "set-cookie" not in response.headers

    def test_session_only_without_jwt_secret(self, settings_factory):
        client = TestClient(create_app(settings_factory(JWT_SECRET=None)), base_url="https://testserver")
        document = {"_id": USER_ID, "email": "sari@example.com", "name": "Sari", "password_hash": hash_password("benar")}

        with patch.object(UserService, "find_by_email", new=AsyncMock(return_value=document)):
            response = client.post("/api/auth/login", json={"email": "sari@example.com", "password": "benar"})

        assert response.status_code == 200
        assert response.json()["access_token"] is None
        assert "session=" in response.headers["set-cookie"]


# =============================================================================
# Bearer Authentication
# =============================================================================

class TestBearer:

    def test_valid_bearer(self, client, user_headers, sample_user):
        with patch.object(UserService, "get_user", new=AsyncMock(return_value=sample_user)):
            response = client.get("/api/auth/me", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["id"] == USER_ID

    def test_invalid_bearer_is_anonymous(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_foreign_secret_is_anonymous(self, client):
        response = client.get("/api/auth/me", headers=bearer_for(USER_ID, secret="someone-else"))

        assert response.status_code == 401

    def test_non_bearer_scheme_ignored(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.status_code == 401

    def test_me_falls_back_to_token_claims(self, client, user_headers):
        error = DatabaseUnavailableError()
        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=error)):
            response = client.get("/api/auth/me", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "user@example.com"

    def test_deleted_users_token_is_anonymous(self, client, user_headers):
        error = DocumentNotFoundError("users", USER_ID)
        with patch.object(UserService, "get_user", new=AsyncMock(side_effect=error)):
            response = client.get("/api/auth/me", headers=user_headers)

        assert response.status_code == 401

    def test_token_role_is_reloaded(self, client, admin_headers, sample_user):
        demoted = {**sample_user, "id": ADMIN_ID, "role": "user"}
        with patch.object(UserService, "get_user", new=AsyncMock(return_value=demoted)), \
                patch.object(UserService, "list_users", new=AsyncMock(return_value=[])):
            response = client.get("/api/users", headers=admin_headers)

        assert response.status_code == 403

    def test_role_required(self, client, approver_headers):
        response = client.get("/api/users", headers=approver_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"


# =============================================================================
# Google Sign-In
# =============================================================================

@pytest.fixture
def google_client(settings_factory):
    settings = settings_factory(GOOGLE_CLIENT_ID="client-id", GOOGLE_CLIENT_SECRET="client-secret")
    return TestClient(create_app(settings), base_url="https://testserver", follow_redirects=False)


def start_google_login(client) -> str:
    """Follow /api/auth/google and return the issued state."""
    response = client.get("/api/auth/google")
    assert response.status_code == 302
    return httpx.URL(response.headers["location"]).params["state"]


class TestGoogleRoutes:

    def test_not_configured(self, client):
        response = client.get("/api/auth/google", follow_redirects=False)

        assert response.status_code == 503
        assert response.json()["code"] == "OAUTH_NOT_CONFIGURED"

    def test_redirects_to_consent_screen(self, google_client):
        response = google_client.get("/api/auth/google")
        location = httpx.URL(response.headers["location"])

        assert response.status_code == 302
        assert location.host == "accounts.google.com"
        assert location.params["client_id"] == "client-id"
        assert location.params["redirect_uri"] == "https://testserver/api/auth/google/callback"
        assert location.params["state"]

    def test_callback_state_mismatch(self, google_client):
        start_google_login(google_client)

        response = google_client.get("/api/auth/google/callback", params={"code": "abc", "state": "forged"})

        assert response.status_code == 400
        assert response.json()["code"] == "OAUTH_STATE_MISMATCH"

    def test_callback_without_prior_redirect(self, google_client):
        response = google_client.get("/api/auth/google/callback", params={"code": "abc", "state": "x"})

        assert response.status_code == 400

    def test_callback_logs_in_and_redirects(self, google_client, sample_user):
        state = start_google_login(google_client)
        profile = AsyncMock(return_value=GoogleProfile(sub="google-123", email="sari@example.com", name="Sari"))

        with patch("app.auth.routes.exchange_code", new=AsyncMock(return_value="access")), \
                patch("app.auth.routes.fetch_google_profile", new=profile), \
                patch.object(UserService, "upsert_google_user", new=AsyncMock(return_value=sample_user)) as upsert:
            response = google_client.get("/api/auth/google/callback", params={"code": "abc", "state": state})

        assert response.status_code == 302
        assert response.headers["location"] == "https://paw-solinum.netlify.app"
        assert upsert.await_args.kwargs["google_id"] == "google-123"

        with patch.object(UserService, "get_user", new=AsyncMock(return_value=sample_user)):
            assert google_client.get("/api/auth/me").json()["id"] == USER_ID

    def test_callback_provider_error(self, google_client):
        state = start_google_login(google_client)

        response = google_client.get(
            "/api/auth/google/callback",
            params={"error": "access_denied", "state": state},
        )

        assert response.status_code == 502
        assert response.json()["details"]["error"] == "access_denied"


class TestGoogleProvider:

    def test_authorization_url(self):
        url = httpx.URL(build_authorization_url("cid", "https://api.example/cb", "s1"))

        assert url.params["response_type"] == "code"
        assert url.params["scope"] == "openid email profile"
        assert url.params["redirect_uri"] == "https://api.example/cb"

    def test_exchange_code(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == GOOGLE_TOKEN_URL
            assert b"code=abc" in request.content
            return httpx.Response(200, json={"access_token": "tok"})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await exchange_code("abc", "cid", "secret", "https://api.example/cb", client=http)

        assert asyncio.run(run()) == "tok"

    def test_exchange_code_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await exchange_code("abc", "cid", "secret", "https://api.example/cb", client=http)

        with pytest.raises(OAuthExchangeError):
            asyncio.run(run())

    def test_fetch_profile(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == GOOGLE_USERINFO_URL
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(200, json={
                "sub": "g1",
                "email": "sari@example.com",
                "email_verified": True,
                "name": "Sari",
            })

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await fetch_google_profile("tok", client=http)

        profile = asyncio.run(run())
        assert profile.sub == "g1"
        assert profile.email == "sari@example.com"

    def test_fetch_profile_without_email(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"sub": "g1"})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await fetch_google_profile("tok", client=http)

        with pytest.raises(OAuthExchangeError):
            asyncio.run(run())

    def test_fetch_profile_unverified_email(self):
        """An unverified address must not sign in as the account that owns it."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"sub": "g2", "email": "sari@example.com", "email_verified": False})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await fetch_google_profile("tok", client=http)

        with pytest.raises(OAuthExchangeError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.details["error"] == "email not verified"

    def test_callback_with_unverified_email_links_nothing(self, google_client):
        state = start_google_login(google_client)
        error = OAuthExchangeError("email not verified")

        with patch("app.auth.routes.exchange_code", new=AsyncMock(return_value="access")), \
                patch("app.auth.routes.fetch_google_profile", new=AsyncMock(side_effect=error)), \
                patch.object(UserService, "upsert_google_user", new=AsyncMock()) as upsert:
            response = google_client.get("/api/auth/google/callback", params={"code": "abc", "state": state})

        assert response.status_code == 502
        upsert.assert_not_awaited()
        assert google_client.get("/api/auth/me").status_code == 401
