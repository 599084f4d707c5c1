# =============================================================================
# app/routers/laporan.py - Report (Laporan) CRUD Endpoints
# =============================================================================
# Mounted at /api/laporan. All endpoints require authentication.
#
# Users see their own reports. Approvers and admins see everyone's.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from starlette.concurrency import run_in_threadpool

from app.auth import AuthUser, get_current_user
from app.dependencies import StorageDep
from core.models.laporan import LaporanCreate, LaporanList, LaporanResponse, LaporanStatus, LaporanUpdate
from core.services.finaldoc_service import FinalDocService
from core.services.laporan_service import LaporanService

router = APIRouter()


@router.post("", response_model=LaporanResponse, status_code=status.HTTP_201_CREATED)
async def create_laporan(body: LaporanCreate, user: AuthUser = Depends(get_current_user)):
    """Create a draft report owned by the current user."""
    return await LaporanService.create_laporan(owner_id=user.id, data=body)


@router.get("", response_model=LaporanList)
async def list_laporan(
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
    status: Annotated[LaporanStatus | None, Query(description="Filter by status")] = None,
    mine: Annotated[bool, Query(description="Only my reports (approvers/admins)")] = False,
):
    """List reports with pagination, newest first."""
    owner_id = None if user.can_review and not mine else user.id
    reports, total = await LaporanService.list_laporan(
        owner_id=owner_id,
        status=status,
        page=page,
        page_size=page_size,
    )
    return LaporanList(laporan=reports, total=total, page=page, page_size=page_size)


@router.get("/{laporan_id}", response_model=LaporanResponse)
async def get_laporan(laporan_id: str, user: AuthUser = Depends(get_current_user)):
    return await LaporanService.get_laporan(laporan_id, user_id=user.id, can_view_all=user.can_review)


@router.patch("/{laporan_id}", response_model=LaporanResponse)
async def update_laporan(
    laporan_id: str,
    body: LaporanUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Edit a draft or rejected report (owner only)."""
    return await LaporanService.update_laporan(laporan_id, owner_id=user.id, data=body)


@router.delete("/{laporan_id}")
async def delete_laporan(
    laporan_id: str,
    storage: StorageDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete a draft (owner) or any report (admin).

    Final documents of the report are deleted with it, files included.
    """
    await LaporanService.delete_laporan(laporan_id, user_id=user.id, is_admin=user.is_admin)
    for document in await FinalDocService.delete_for_laporan(laporan_id):
        await run_in_threadpool(storage.delete, document["stored_name"])
    return {"id": laporan_id, "message": "Laporan deleted"}


@router.post("/{laporan_id}/submit", response_model=LaporanResponse)
async def submit_laporan(laporan_id: str, user: AuthUser = Depends(get_current_user)):
    """Send a draft or rejected report for approval."""
    return await LaporanService.submit_laporan(laporan_id, owner_id=user.id)
