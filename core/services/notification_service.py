# =============================================================================
# core/services/notification_service.py - Notification Business Logic
# =============================================================================

import logging
from typing import Any

from pymongo import ReturnDocument

from app.exceptions import DocumentNotFoundError
from core.models.notification import NotificationCreate
from lib.mongo_client import MongoDBClient
from lib.utils import serialize_document, to_object_id, utcnow

logger = logging.getLogger(__name__)

COLLECTION = "notifications"


class NotificationService:
    """Per-user notifications. Users only ever see their own."""

    @staticmethod
    def _collection():
        return MongoDBClient.get_collection(COLLECTION)

    @staticmethod
    async def create_notification(data: NotificationCreate) -> dict[str, Any]:
        document = {
            **data.model_dump(),
            "read": False,
            "created_at": utcnow(),
        }
        result = await NotificationService._collection().insert_one(document)
        document["_id"] = result.inserted_id
        logger.debug(f"Notified user {data.user_id}: {data.kind}")
        return serialize_document(document)

    @staticmethod
    async def list_notifications(
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> tuple[list[dict[str, Any]], int, int]:
        """
        Returns:
            (notifications newest first, total matching, total unread)
        """
        collection = NotificationService._collection()
        query: dict[str, Any] = {"user_id": user_id}
        if unread_only:
            query["read"] = False

        cursor = collection.find(query).sort("created_at", -1).limit(limit)
        notifications = [serialize_document(d) for d in await cursor.to_list(length=None)]
        total = await collection.count_documents(query)
        unread = await collection.count_documents({"user_id": user_id, "read": False})
        return notifications, total, unread

    @staticmethod
    async def mark_read(notification_id: str, user_id: str) -> dict[str, Any]:
        document = await NotificationService._collection().find_one_and_update(
            {"_id": to_object_id(notification_id), "user_id": user_id},
            {"$set": {"read": True}},
            return_document=ReturnDocument.AFTER,
        )
        if not document:
            raise DocumentNotFoundError(COLLECTION, notification_id)
        return serialize_document(document)

    @staticmethod
    async def mark_all_read(user_id: str) -> int:
        result = await NotificationService._collection().update_many(
            {"user_id": user_id, "read": False},
            {"$set": {"read": True}},
        )
        return result.modified_count

    @staticmethod
    async def delete_notification(notification_id: str, user_id: str) -> None:
        result = await NotificationService._collection().delete_one(
            {"_id": to_object_id(notification_id), "user_id": user_id}
        )
        if result.deleted_count == 0:
            raise DocumentNotFoundError(COLLECTION, notification_id)
