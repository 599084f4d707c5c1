# =============================================================================
# core/services/approval_service.py - Approval Workflow
# =============================================================================
# Deciding a report:
# 1. Move it pending -> approved/rejected (fails if someone else decided)
# 2. Record the decision in the approvals collection
# 3. Notify the report owner
# =============================================================================

import logging
from typing import Any

from core.models.approval import ApprovalDecision
from core.models.laporan import LaporanStatus
from core.models.notification import NotificationCreate
from core.services.laporan_service import LaporanService
from core.services.notification_service import NotificationService
from lib.mongo_client import MongoDBClient
from lib.utils import serialize_document, to_object_id, utcnow

logger = logging.getLogger(__name__)

COLLECTION = "approvals"

DECISION_STATUS = {
    ApprovalDecision.APPROVED: LaporanStatus.APPROVED,
    ApprovalDecision.REJECTED: LaporanStatus.REJECTED,
}


class ApprovalService:

    @staticmethod
    def _collection():
        return MongoDBClient.get_collection(COLLECTION)

    @staticmethod
    async def list_pending(page: int = 1, page_size: int = 20) -> tuple[list[dict[str, Any]], int]:
        return await LaporanService.list_laporan(
            status=LaporanStatus.PENDING,
            page=page,
            page_size=page_size,
        )

    @staticmethod
    async def decide(
        laporan_id: str,
        approver_id: str,
        decision: ApprovalDecision,
        note: str | None = None,
    ) -> dict[str, Any]:
        """
        Approve or reject a pending report.

        Returns:
            The recorded approval document

        Raises:
            DocumentNotFoundError: If the report doesn't exist
            InvalidStateError: If the report is not pending
        """
        laporan = await LaporanService.transition(
            laporan_id,
            expected=LaporanStatus.PENDING,
            new_status=DECISION_STATUS[decision],
            reviewer_id=approver_id,
            note=note,
        )

        document = {
            "laporan_id": laporan_id,
            "decision": decision.value,
            "note": note,
            "approver_id": approver_id,
            "created_at": utcnow(),
        }
        result = await ApprovalService._collection().insert_one(document)
        document["_id"] = result.inserted_id

        message = f'Laporan "{laporan["title"]}" was {decision.value}'
        if note:
            message += f": {note}"
        await NotificationService.create_notification(NotificationCreate(
            user_id=laporan["owner_id"],
            message=message[:500],
            laporan_id=laporan_id,
            kind=decision.value,
        ))

        logger.info(f"Laporan {laporan_id} {decision.value} by {approver_id}")
        return serialize_document(document)

    @staticmethod
    async def list_for_laporan(laporan_id: str) -> list[dict[str, Any]]:
        """Decision history of one report, oldest first."""
        to_object_id(laporan_id)  # 400 on malformed ids
        cursor = ApprovalService._collection().find({"laporan_id": laporan_id}).sort("created_at", 1)
        return [serialize_document(d) for d in await cursor.to_list(length=None)]
