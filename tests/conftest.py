# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Builds apps from explicit Settings (no shared global configuration)
# - TestClient runs on https://testserver so Secure cookies round-trip
# - No MongoDB: services are patched per test
# =============================================================================

import os
import tempfile

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds a module-level app on import

os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="solinum-uploads-"))

import pytest
from fastapi.testclient import TestClient

from app.auth.models import AuthUser
from app.auth.security import create_access_token
from app.config import Settings
from app.main import create_app
from core.models.user import UserRole

TEST_JWT_SECRET = "test-jwt-secret"

USER_ID = "65a1f0c2e4b0a1b2c3d4e5f6"
APPROVER_ID = "65a1f0c2e4b0a1b2c3d4e5f7"
ADMIN_ID = "65a1f0c2e4b0a1b2c3d4e5f8"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings_factory(tmp_path):
    """Build Settings ignoring any .env file; keyword overrides win over env."""

    def factory(**overrides) -> Settings:
        values = {
            "SESSION_SECRET": "test-session-secret",
            "JWT_SECRET": TEST_JWT_SECRET,
            "NODE_ENV": "test",
            "FRONTEND_ORIGIN": "https://paw-solinum.netlify.app",
            "VERCEL_URL": "paw-solinum-git-finaldoc.vercel.app",
            "UPLOAD_DIR": str(tmp_path / "uploads"),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def settings(settings_factory):
    return settings_factory()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app, base_url="https://testserver")


def bearer_for(user_id: str, role: UserRole = UserRole.USER, secret: str = TEST_JWT_SECRET) -> dict[str, str]:
    principal = AuthUser(id=user_id, email=f"{role.value}@example.com", name=role.value.title(), role=role)
    return {"Authorization": f"Bearer {create_access_token(principal, secret, 60)}"}


@pytest.fixture
def user_headers():
    return bearer_for(USER_ID, UserRole.USER)


@pytest.fixture
def approver_headers():
    return bearer_for(APPROVER_ID, UserRole.APPROVER)


@pytest.fixture
def admin_headers():
    return bearer_for(ADMIN_ID, UserRole.ADMIN)


@pytest.fixture
def sample_laporan():
    """Serialized report as returned by LaporanService."""
    return {
        "id": "65b2a0c2e4b0a1b2c3d4e5a1",
        "title": "Jalan berlubang di Jl. Kaliurang",
        "description": "Lubang besar dekat halte",
        "category": "infrastruktur",
        "location": "Sleman",
        "status": "pending",
        "owner_id": USER_ID,
        "review_note": None,
        "reviewed_by": None,
        "created_at": "2024-05-01T08:00:00+00:00",
        "updated_at": "2024-05-01T08:00:00+00:00",
    }


@pytest.fixture
def sample_user():
    """Serialized user as returned by UserService (no credentials)."""
    return {
        "id": USER_ID,
        "email": "sari@example.com",
        "name": "Sari",
        "role": "user",
        "provider": "local",
        "avatar_url": None,
    }
