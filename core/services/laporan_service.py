# =============================================================================
# core/services/laporan_service.py - Report Business Logic
# =============================================================================
# Handles report CRUD and the status transitions of the approval flow.
#
# Status changes are compare-and-set on the current status, so two
# approvers deciding the same report can't both win.
# =============================================================================

import logging
from typing import Any

from pymongo import ReturnDocument

from app.exceptions import DocumentNotFoundError, InvalidStateError, PermissionDeniedError
from core.models.laporan import EDITABLE_STATUSES, LaporanCreate, LaporanStatus, LaporanUpdate
from lib.mongo_client import MongoDBClient
from lib.utils import serialize_document, to_object_id, utcnow

logger = logging.getLogger(__name__)

COLLECTION = "laporan"


class LaporanService:
    """
    Service for report operations.

    Ownership checks take a user id plus a can_view_all flag
    (approvers and admins) instead of a request object.
    """

    @staticmethod
    def _collection():
        return MongoDBClient.get_collection(COLLECTION)

    @staticmethod
    async def create_laporan(owner_id: str, data: LaporanCreate) -> dict[str, Any]:
        now = utcnow()
        document = {
            **data.model_dump(),
            "status": LaporanStatus.DRAFT.value,
            "owner_id": owner_id,
            "review_note": None,
            "reviewed_by": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await LaporanService._collection().insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(f"Created laporan: {result.inserted_id} for user: {owner_id}")
        return serialize_document(document)

    @staticmethod
    async def get_laporan(
        laporan_id: str,
        user_id: str | None = None,
        can_view_all: bool = False,
    ) -> dict[str, Any]:
        """
        Get a report by id.

        Args:
            laporan_id: Report id
            user_id: If provided (and not can_view_all), must own the report
            can_view_all: Skip the ownership check

        Raises:
            DocumentNotFoundError: If missing or not visible to the user
        """
        document = await LaporanService._collection().find_one({"_id": to_object_id(laporan_id)})
        if not document:
            raise DocumentNotFoundError(COLLECTION, laporan_id)

        # Don't reveal that someone else's report exists
        if user_id and not can_view_all and document.get("owner_id") != user_id:
            raise DocumentNotFoundError(COLLECTION, laporan_id)

        return serialize_document(document)

    @staticmethod
    async def list_laporan(
        owner_id: str | None = None,
        status: LaporanStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List reports, newest first.

        Args:
            owner_id: Restrict to one owner (None = all owners)
            status: Optional status filter
            page: 1-based page number
            page_size: Items per page

        Returns:
            (reports on this page, total matching)
        """
        collection = LaporanService._collection()
        query: dict[str, Any] = {}
        if owner_id:
            query["owner_id"] = owner_id
        if status:
            query["status"] = status.value

        cursor = (
            collection.find(query)
            .sort("created_at", -1)
            .skip((page - 1) * page_size)
            .limit(page_size)
        )
        reports = [serialize_document(d) for d in await cursor.to_list(length=None)]
        total = await collection.count_documents(query)
        return reports, total

    @staticmethod
    async def list_ids(owner_id: str) -> list[str]:
        """Ids of every report owned by owner_id."""
        ids = await LaporanService._collection().distinct("_id", {"owner_id": owner_id})
        return [str(i) for i in ids]

    @staticmethod
    async def update_laporan(laporan_id: str, owner_id: str, data: LaporanUpdate) -> dict[str, Any]:
        """
        Edit a report's content.

        Raises:
            DocumentNotFoundError: If missing or not owned by owner_id
            InvalidStateError: If the report is pending or approved
        """
        current = await LaporanService.get_laporan(laporan_id, user_id=owner_id)
        if LaporanStatus(current["status"]) not in EDITABLE_STATUSES:
            raise InvalidStateError(laporan_id, current["status"], "edit")

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return current

        changes["updated_at"] = utcnow()
        document = await LaporanService._collection().find_one_and_update(
            {"_id": to_object_id(laporan_id), "status": {"$in": [s.value for s in EDITABLE_STATUSES]}},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not document:
            raise InvalidStateError(laporan_id, current["status"], "edit")
        return serialize_document(document)

    @staticmethod
    async def delete_laporan(laporan_id: str, user_id: str, is_admin: bool = False) -> None:
        """
        Owners may delete drafts; admins may delete anything.

        Raises:
            DocumentNotFoundError: If missing or not visible
            PermissionDeniedError: If a non-admin deletes a submitted report
        """
        current = await LaporanService.get_laporan(laporan_id, user_id=user_id, can_view_all=is_admin)
        if not is_admin and current["status"] != LaporanStatus.DRAFT.value:
            raise PermissionDeniedError("delete a submitted laporan")

        await LaporanService._collection().delete_one({"_id": to_object_id(laporan_id)})
        logger.info(f"Deleted laporan {laporan_id} by {user_id}")

    @staticmethod
    async def submit_laporan(laporan_id: str, owner_id: str) -> dict[str, Any]:
        """Send a draft (or rejected) report to approval."""
        current = await LaporanService.get_laporan(laporan_id, user_id=owner_id)
        for expected in EDITABLE_STATUSES:
            if current["status"] == expected.value:
                return await LaporanService.transition(laporan_id, expected, LaporanStatus.PENDING)
        raise InvalidStateError(laporan_id, current["status"], "submit")

    @staticmethod
    async def transition(
        laporan_id: str,
        expected: LaporanStatus,
        new_status: LaporanStatus,
        reviewer_id: str | None = None,
        note: str | None = None,
    ) -> dict[str, Any]:
        """
        Move a report from expected to new_status atomically.

        Raises:
            DocumentNotFoundError: If the report doesn't exist
            InvalidStateError: If the report is no longer in expected
        """
        changes: dict[str, Any] = {"status": new_status.value, "updated_at": utcnow()}
        if reviewer_id is not None:
            changes["reviewed_by"] = reviewer_id
            changes["review_note"] = note

        collection = LaporanService._collection()
        document = await collection.find_one_and_update(
            {"_id": to_object_id(laporan_id), "status": expected.value},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if document:
            logger.info(f"Laporan {laporan_id}: {expected.value} -> {new_status.value}")
            return serialize_document(document)

        current = await collection.find_one({"_id": to_object_id(laporan_id)}, {"status": 1})
        if not current:
            raise DocumentNotFoundError(COLLECTION, laporan_id)
        raise InvalidStateError(laporan_id, current["status"], f"move to {new_status.value}")
