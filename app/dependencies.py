# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Settings come from app.state (set by create_app), not a module global,
# so tests can build apps with different configurations side by side.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.services.storage_service import StorageService


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


def get_storage(settings: SettingsDep) -> StorageService:
    """Upload storage rooted at UPLOAD_DIR."""
    return StorageService(settings.UPLOAD_DIR)


StorageDep = Annotated[StorageService, Depends(get_storage)]
