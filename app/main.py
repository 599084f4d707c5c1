# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Solinum API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Request path (outermost first):
#   CORS gate -> session -> authentication -> security headers
#   -> /uploads static files | router table -> exception handlers
#
# Usage:
#   uvicorn app.main:app --reload        (serverless platforms import app.main:app)
#   python -m app.main                   (local server unless NODE_ENV=production)
# =============================================================================

import logging
import secrets
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.config import SESSION_MAX_AGE, Settings, check_environment, get_settings
from app.exceptions import register_exception_handlers
from app.middleware import (
    OriginGateMiddleware,
    OriginPolicy,
    SecurityHeadersMiddleware,
    SessionTokenBackend,
)
from app.routers import include_routers
from core.services.user_service import UserService
from lib.mongo_client import MongoDBClient, MongoDBClientError

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "OK - finaldoc branch"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: connect to MongoDB and create indexes (failures are logged,
      never fatal)
    - Shutdown: close the connection
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting Solinum API ({settings.NODE_ENV})")
    logger.info(f"CORS policy: {app.state.origin_policy.describe()}")

    if settings.MONGO_URI:
        try:
            await MongoDBClient.connect(settings.MONGO_URI, settings.MONGO_DB_NAME, settings.MONGO_TIMEOUT_MS)
        except MongoDBClientError as e:
            logger.error(f"Database connection failed: {e.message}")
        else:
            try:
                await UserService.ensure_indexes()
            except PyMongoError as e:
                logger.warning(f"Could not create user indexes: {e}")
    else:
        logger.warning("MONGO_URI not set; database routes will answer 503")

    yield

    logger.info("Shutting down Solinum API")
    await MongoDBClient.close()


def _session_secret(settings: Settings) -> str:
    if settings.SESSION_SECRET:
        return settings.SESSION_SECRET
    logger.error("ERROR: SESSION_SECRET is required in environment variables")
    # Sessions still work but won't survive a restart or span instances
    return secrets.token_urlsafe(32)


def _ensure_upload_dir(settings: Settings) -> None:
    try:
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Read-only filesystems (serverless) can still serve everything else
        logger.warning(f"Upload directory {settings.UPLOAD_DIR} unavailable: {e}")


async def root() -> PlainTextResponse:
    """Liveness check."""
    return PlainTextResponse(LIVENESS_TEXT)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration to use (defaults to the cached environment
            settings). Everything configurable is derived from it here.

    Returns:
        The configured FastAPI app
    """
    settings = settings or get_settings()
    configure_logging(settings)
    check_environment(settings)
    _ensure_upload_dir(settings)

    origin_policy = OriginPolicy.from_settings(settings)

    app = FastAPI(
        title="Solinum API",
        description="Reports (laporan), approvals, notifications and final documents.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.origin_policy = origin_policy

    # =========================================================================
    # Middleware (the last one added runs first)
    # =========================================================================

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AuthenticationMiddleware, backend=SessionTokenBackend(settings.JWT_SECRET))
    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(settings),
        max_age=SESSION_MAX_AGE,
        same_site="none",
        https_only=settings.session_cookie_secure,
    )
    app.add_middleware(OriginGateMiddleware, policy=origin_policy)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    # =========================================================================
    # Routes
    # =========================================================================

    app.add_api_route("/", root, methods=["GET"], response_class=PlainTextResponse, tags=["Root"])
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
    include_routers(app)

    return app


app = create_app()


if __name__ == "__main__":
    current = app.state.settings
    if current.is_production:
        logger.info("NODE_ENV=production: not starting a local server")
    else:
        logger.info(f"Server is running on port: {current.PORT}")
        uvicorn.run(app, host="0.0.0.0", port=current.PORT)
