# =============================================================================
# app/routers/diagnostics.py - Diagnostics Endpoints
# =============================================================================
# Mounted twice, at /api/test and /api/diag (same handlers).
# Lets an operator see why a deployment misbehaves without shell access:
# which variables are missing and whether MongoDB is reachable.
# Never returns secret values.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.config import REQUIRED_ENV_VARS, missing_required_env
from app.dependencies import SettingsDep
from lib.mongo_client import MongoDBClient

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class DiagnosticsResponse(BaseModel):
    """Overall status."""
    status: str
    environment: str
    missing_env: list[str]
    database: str
    cors_policy: str
    timestamp: str


class DatabaseCheckResponse(BaseModel):
    database: str
    error: str | None = None
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=DiagnosticsResponse)
async def diagnostics(request: Request, settings: SettingsDep):
    """
    Summary of the deployment.

    status is "ok" when nothing is missing and the database is connected,
    "degraded" otherwise.
    """
    missing = missing_required_env(settings)
    database = "connected" if MongoDBClient.is_connected() else "disconnected"
    return DiagnosticsResponse(
        status="ok" if not missing and database == "connected" else "degraded",
        environment=settings.NODE_ENV,
        missing_env=missing,
        database=database,
        cors_policy=request.app.state.origin_policy.kind,
        timestamp=_now(),
    )


@router.get("/env")
async def environment(settings: SettingsDep) -> dict[str, bool]:
    """Which variables are set (booleans only)."""
    names = (*REQUIRED_ENV_VARS, "FRONTEND_ORIGIN", "VERCEL_URL")
    return {name: bool(getattr(settings, name)) for name in names}


@router.get("/db", response_model=DatabaseCheckResponse)
async def database_check():
    """Ping MongoDB."""
    if not MongoDBClient.is_connected():
        return DatabaseCheckResponse(
            database="not connected",
            error=MongoDBClient.last_error(),
            timestamp=_now(),
        )

    healthy = await MongoDBClient.ping()
    return DatabaseCheckResponse(
        database="healthy" if healthy else "unreachable",
        error=None if healthy else MongoDBClient.last_error(),
        timestamp=_now(),
    )
