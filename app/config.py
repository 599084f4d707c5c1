# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single, immutable Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.FRONTEND_ORIGIN)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Nothing here is strictly required. Serverless platforms must still be able
# to answer requests (and show diagnostics) when variables are missing, so
# absent values are reported by check_environment() instead of failing
# validation.
# =============================================================================

import logging
import re
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Checked once at startup, one warning per missing name
REQUIRED_ENV_VARS: tuple[str, ...] = (
    "MONGO_URI",
    "JWT_SECRET",
    "EMAIL_USER",
    "EMAIL_PASS",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "SESSION_SECRET",
)

DEFAULT_FRONTEND_ORIGIN = "https://paw-solinum.netlify.app"

# 24 hours, in seconds
SESSION_MAX_AGE = 24 * 60 * 60


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    Instances are frozen. Build one explicitly (tests do) or use the cached
    instance returned by get_settings().
    """

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    PORT: int = Field(
        default=5001,
        ge=1,
        le=65535,
        description="Port for the local development server"
    )

    NODE_ENV: str = Field(
        default="development",
        description="Deployment environment name (production disables the local server)"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    FRONTEND_ORIGIN: str = Field(
        default=DEFAULT_FRONTEND_ORIGIN,
        description="Origin of the deployed frontend"
    )

    VERCEL_URL: str | None = Field(
        default=None,
        description="Deployment host provided by the platform (e.g. app-xxxx.vercel.app)"
    )

    CORS_POLICY: Literal["pattern", "list"] = Field(
        default="pattern",
        description="Origin check strategy: regex pattern or exact whitelist"
    )

    # Comma-separated, only used by the "list" policy
    CORS_ORIGINS: str = Field(
        default=f"{DEFAULT_FRONTEND_ORIGIN},http://localhost:3000,http://localhost:5173",
        description="Whitelisted origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Sessions & Auth
    # -------------------------------------------------------------------------

    SESSION_SECRET: str | None = Field(
        default=None,
        description="Secret used to sign the session cookie"
    )

    JWT_SECRET: str | None = Field(
        default=None,
        description="Secret used to sign bearer tokens (HS256)"
    )

    JWT_EXPIRE_MINUTES: int = Field(
        default=24 * 60,
        ge=1,
        description="Lifetime of issued bearer tokens"
    )

    GOOGLE_CLIENT_ID: str | None = Field(default=None, description="Google OAuth client id")

    GOOGLE_CLIENT_SECRET: str | None = Field(default=None, description="Google OAuth client secret")

    GOOGLE_CALLBACK_URL: str | None = Field(
        default=None,
        description="Absolute OAuth redirect URI (defaults to this server's callback route)"
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------

    MONGO_URI: str | None = Field(default=None, description="MongoDB connection string")

    MONGO_DB_NAME: str = Field(default="solinum", description="Database name")

    MONGO_TIMEOUT_MS: int = Field(
        default=5000,
        ge=100,
        description="Server selection timeout for the startup ping"
    )

    # -------------------------------------------------------------------------
    # Email (presence only, checked at startup)
    # -------------------------------------------------------------------------

    EMAIL_USER: str | None = Field(default=None)

    EMAIL_PASS: str | None = Field(default=None)

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    UPLOAD_DIR: str = Field(
        default="uploads",
        description="Directory served under /uploads"
    )

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Maximum final document size in MB"
    )

    ALLOWED_EXTENSIONS: str = Field(
        default=".pdf,.doc,.docx",
        description="Allowed final document extensions (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty strings count as unset, like a missing variable
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """Example: ".pdf, .docx" -> [".pdf", ".docx"]"""
        return [ext.strip().lower() for ext in self.ALLOWED_EXTENSIONS.split(",") if ext.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    @property
    def session_cookie_secure(self) -> bool:
        # Secure in every environment; SameSite=None cookies require it
        return True

    @property
    def frontend_host(self) -> str:
        """FRONTEND_ORIGIN without its scheme."""
        return strip_scheme(self.FRONTEND_ORIGIN)

    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


def strip_scheme(value: str) -> str:
    """Remove a leading http:// or https:// from a host or origin."""
    return re.sub(r"^https?://", "", value.strip())


def missing_required_env(settings: Settings) -> list[str]:
    """Return the names of required variables that are not set."""
    return [name for name in REQUIRED_ENV_VARS if not getattr(settings, name)]


def check_environment(settings: Settings) -> list[str]:
    """
    Warn once per missing required variable.

    Never raises: the process keeps serving so platforms can surface the
    diagnostics instead of a crash.

    Returns:
        The missing variable names
    """
    missing = missing_required_env(settings)
    for name in missing:
        logger.warning(f"Missing required environment variable: {name}")
    return missing


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()
