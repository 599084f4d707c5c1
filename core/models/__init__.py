# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: Users and roles
# - laporan.py: Reports and their approval status
# - notification.py: Per-user notifications
# - approval.py: Approval decisions
# - finaldoc.py: Final documents attached to approved reports
#
# These models define the "contract" between API and clients.
# =============================================================================

from .user import UserList, UserResponse, UserRole, UserUpdate
from .laporan import (
    EDITABLE_STATUSES,
    LaporanCreate,
    LaporanList,
    LaporanResponse,
    LaporanStatus,
    LaporanUpdate,
)
from .notification import NotificationCreate, NotificationList, NotificationResponse
from .approval import ApprovalDecision, ApprovalRequest, ApprovalResponse, RejectionRequest
from .finaldoc import FinalDocList, FinalDocResponse

__all__ = [
    # User
    "UserList",
    "UserResponse",
    "UserRole",
    "UserUpdate",
    # Laporan
    "EDITABLE_STATUSES",
    "LaporanCreate",
    "LaporanList",
    "LaporanResponse",
    "LaporanStatus",
    "LaporanUpdate",
    # Notification
    "NotificationCreate",
    "NotificationList",
    "NotificationResponse",
    # Approval
    "ApprovalDecision",
    "ApprovalRequest",
    "ApprovalResponse",
    "RejectionRequest",
    # Final documents
    "FinalDocList",
    "FinalDocResponse",
]
