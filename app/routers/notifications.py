# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================
# Mounted at /api/notifications. Users only see their own notifications.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models.notification import NotificationList, NotificationResponse
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationList)
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    unread: Annotated[bool, Query(description="Only unread notifications")] = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
):
    notifications, total, unread_count = await NotificationService.list_notifications(
        user.id,
        unread_only=unread,
        limit=limit,
    )
    return NotificationList(notifications=notifications, total=total, unread=unread_count)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: str, user: AuthUser = Depends(get_current_user)):
    return await NotificationService.mark_read(notification_id, user.id)


@router.post("/read-all")
async def mark_all_read(user: AuthUser = Depends(get_current_user)):
    updated = await NotificationService.mark_all_read(user.id)
    return {"updated": updated}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, user: AuthUser = Depends(get_current_user)):
    await NotificationService.delete_notification(notification_id, user.id)
    return {"id": notification_id, "message": "Notification deleted"}
