# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    """Internal: services create notifications, clients only read them."""
    user_id: str
    message: str = Field(..., min_length=1, max_length=500)
    laporan_id: str | None = None
    kind: str = Field(default="info", description="e.g. 'approved', 'rejected', 'info'")


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    message: str
    laporan_id: str | None = None
    kind: str = "info"
    read: bool = False
    created_at: datetime | None = None


class NotificationList(BaseModel):
    notifications: list[NotificationResponse]
    total: int
    unread: int
