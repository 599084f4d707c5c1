# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .laporan_service import LaporanService
from .notification_service import NotificationService
from .approval_service import ApprovalService
from .finaldoc_service import FinalDocService
from .storage_service import StorageService

__all__ = [
    "UserService",
    "LaporanService",
    "NotificationService",
    "ApprovalService",
    "FinalDocService",
    "StorageService",
]
