# =============================================================================
# app/routers/approvals.py - Approval Workflow Endpoints
# =============================================================================
# Mounted at /api/approvals. Deciding requires the approver (or admin) role.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user, require_role
from core.models.approval import ApprovalDecision, ApprovalRequest, ApprovalResponse, RejectionRequest
from core.models.laporan import LaporanList
from core.models.user import UserRole
from core.services.approval_service import ApprovalService
from core.services.laporan_service import LaporanService

router = APIRouter()


@router.get("", response_model=LaporanList)
async def list_pending(
    user: AuthUser = Depends(require_role(UserRole.APPROVER)),
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """Reports waiting for a decision."""
    reports, total = await ApprovalService.list_pending(page=page, page_size=page_size)
    return LaporanList(laporan=reports, total=total, page=page, page_size=page_size)


@router.post("/{laporan_id}/approve", response_model=ApprovalResponse)
async def approve(
    laporan_id: str,
    body: ApprovalRequest | None = None,
    user: AuthUser = Depends(require_role(UserRole.APPROVER)),
):
    """
    Approve a pending report.

    Raises:
        409: If the report is not pending
    """
    note = body.note if body else None
    return await ApprovalService.decide(laporan_id, user.id, ApprovalDecision.APPROVED, note)


@router.post("/{laporan_id}/reject", response_model=ApprovalResponse)
async def reject(
    laporan_id: str,
    body: RejectionRequest,
    user: AuthUser = Depends(require_role(UserRole.APPROVER)),
):
    """
    Reject a pending report with a note for the owner.

    Raises:
        409: If the report is not pending
    """
    return await ApprovalService.decide(laporan_id, user.id, ApprovalDecision.REJECTED, body.note)


@router.get("/{laporan_id}/history", response_model=list[ApprovalResponse])
async def history(laporan_id: str, user: AuthUser = Depends(get_current_user)):
    """Decisions taken on a report, visible to its owner and approvers."""
    await LaporanService.get_laporan(laporan_id, user_id=user.id, can_view_all=user.can_review)
    return await ApprovalService.list_for_laporan(laporan_id)
