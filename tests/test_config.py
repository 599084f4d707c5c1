# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Tests for:
# - Defaults and computed properties
# - Immutability
# - The soft-fail startup environment check
# =============================================================================

import logging

import pytest
from pydantic import ValidationError

from app.config import (
    DEFAULT_FRONTEND_ORIGIN,
    REQUIRED_ENV_VARS,
    Settings,
    check_environment,
    missing_required_env,
    strip_scheme,
)

ALL_REQUIRED = {name: f"value-{name.lower()}" for name in REQUIRED_ENV_VARS}


class TestSettingsDefaults:
    """Defaults when nothing is configured."""

    def test_defaults(self, settings_factory):
        settings = settings_factory(FRONTEND_ORIGIN=DEFAULT_FRONTEND_ORIGIN)

        assert settings.PORT == 5001
        assert settings.FRONTEND_ORIGIN == "https://paw-solinum.netlify.app"
        assert settings.CORS_POLICY == "pattern"
        assert settings.MONGO_DB_NAME == "solinum"

    def test_cors_origins_list_strips_and_skips_blanks(self, settings_factory):
        settings = settings_factory(CORS_ORIGINS=" https://a.example , ,http://localhost:3000 ")

        assert settings.cors_origins_list == ["https://a.example", "http://localhost:3000"]

    def test_allowed_extensions_list(self, settings_factory):
        settings = settings_factory(ALLOWED_EXTENSIONS=".PDF, .docx")

        assert settings.allowed_extensions_list == [".pdf", ".docx"]

    def test_frontend_host_has_no_scheme(self, settings_factory):
        settings = settings_factory(FRONTEND_ORIGIN="https://paw-solinum.netlify.app")

        assert settings.frontend_host == "paw-solinum.netlify.app"

    @pytest.mark.parametrize("node_env", ["production", "development", "test"])
    def test_session_cookie_always_secure(self, settings_factory, node_env):
        assert settings_factory(NODE_ENV=node_env).session_cookie_secure is True

    def test_google_oauth_needs_both_credentials(self, settings_factory):
        assert not settings_factory(GOOGLE_CLIENT_ID="id").google_oauth_enabled
        assert settings_factory(GOOGLE_CLIENT_ID="id", GOOGLE_CLIENT_SECRET="s").google_oauth_enabled

    def test_settings_are_frozen(self, settings):
        with pytest.raises(ValidationError):
            settings.FRONTEND_ORIGIN = "https://elsewhere.example"

    def test_invalid_cors_policy_rejected(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(CORS_POLICY="regex")


class TestStripScheme:

    @pytest.mark.parametrize("value,expected", [
        ("https://app.example", "app.example"),
        ("http://app.example", "app.example"),
        ("app.example", "app.example"),
        ("  https://app.example ", "app.example"),
    ])
    def test_strip_scheme(self, value, expected):
        assert strip_scheme(value) == expected


class TestEnvironmentCheck:
    """Missing variables are warned about, never fatal."""

    def test_nothing_missing(self, settings_factory):
        settings = settings_factory(**ALL_REQUIRED)

        assert missing_required_env(settings) == []

    def test_reports_missing_in_declared_order(self, settings_factory):
        settings = settings_factory(**{**ALL_REQUIRED, "EMAIL_PASS": None, "MONGO_URI": None})

        assert missing_required_env(settings) == ["MONGO_URI", "EMAIL_PASS"]

    def test_one_warning_per_missing_variable(self, settings_factory, caplog):
        settings = settings_factory(**{**ALL_REQUIRED, "JWT_SECRET": None, "GOOGLE_CLIENT_ID": None})

        with caplog.at_level(logging.WARNING, logger="app.config"):
            missing = check_environment(settings)

        assert missing == ["JWT_SECRET", "GOOGLE_CLIENT_ID"]
        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings == [
            "Missing required environment variable: JWT_SECRET",
            "Missing required environment variable: GOOGLE_CLIENT_ID",
        ]

    def test_empty_environment_values_count_as_missing(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "")

        settings = Settings(_env_file=None)

        assert "MONGO_URI" in missing_required_env(settings)
