# =============================================================================
# app/routers/finaldoc.py - Final Document Endpoints
# =============================================================================
# Mounted at /api/finaldoc. Upload the final file of an approved report;
# the file is then downloadable from /uploads/<stored_name>.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.auth import AuthUser, get_current_user
from app.dependencies import SettingsDep, StorageDep
from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidStateError,
    PermissionDeniedError,
)
from core.models.finaldoc import FinalDocList, FinalDocResponse
from core.models.laporan import LaporanStatus
from core.services.finaldoc_service import FinalDocService
from core.services.laporan_service import LaporanService

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_CHUNK_SIZE = 1024 * 1024


async def read_limited(file: UploadFile, max_bytes: int, chunk_size: int = UPLOAD_CHUNK_SIZE) -> bytes:
    """
    Read an upload, stopping as soon as it exceeds max_bytes.

    Raises:
        FileTooLargeError: If the declared or actual size is over the limit
    """
    max_mb = max_bytes // (1024 * 1024)
    if file.size is not None and file.size > max_bytes:
        raise FileTooLargeError(file.size / (1024 * 1024), max_mb)

    chunks = []
    received = 0
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        received += len(chunk)
        if received > max_bytes:
            raise FileTooLargeError(received / (1024 * 1024), max_mb)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("", response_model=FinalDocResponse, status_code=status.HTTP_201_CREATED)
async def upload_finaldoc(
    laporan_id: Annotated[str, Form(description="Approved laporan this document finalizes")],
    file: Annotated[UploadFile, File(description="Final document")],
    settings: SettingsDep,
    storage: StorageDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Attach a final document to an approved report.

    This endpoint:
    1. Checks the report is visible to the user and approved
    2. Validates the file (extension, size)
    3. Writes it to UPLOAD_DIR
    4. Records it in the finaldocs collection

    Raises:
        400: Invalid file type
        409: Report not approved
        413: File too large
    """
    laporan = await LaporanService.get_laporan(laporan_id, user_id=user.id, can_view_all=user.can_review)
    if laporan["status"] != LaporanStatus.APPROVED.value:
        raise InvalidStateError(laporan_id, laporan["status"], "upload a final document")

    filename = file.filename or "document"
    file_ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if file_ext not in settings.allowed_extensions_list:
        raise InvalidFileTypeError(filename, settings.allowed_extensions_list)

    content = await read_limited(file, settings.max_upload_size_bytes)

    stored_name = await run_in_threadpool(storage.save, content, filename)
    try:
        return await FinalDocService.create_finaldoc(
            laporan_id=laporan_id,
            filename=filename,
            stored_name=stored_name,
            content_type=file.content_type,
            size_bytes=len(content),
            uploaded_by=user.id,
        )
    except Exception:
        # No record, no file
        await run_in_threadpool(storage.delete, stored_name)
        raise


@router.get("", response_model=FinalDocList)
async def list_finaldocs(
    user: AuthUser = Depends(get_current_user),
    laporan_id: Annotated[str | None, Query(description="Only documents of this laporan")] = None,
):
    """List final documents of reports visible to the user."""
    if laporan_id:
        await LaporanService.get_laporan(laporan_id, user_id=user.id, can_view_all=user.can_review)
        documents = await FinalDocService.list_finaldocs(laporan_id=laporan_id)
    elif user.can_review:
        documents = await FinalDocService.list_finaldocs()
    else:
        documents = await FinalDocService.list_finaldocs(laporan_ids=await LaporanService.list_ids(user.id))
    return FinalDocList(documents=documents, total=len(documents))


@router.get("/{finaldoc_id}", response_model=FinalDocResponse)
async def get_finaldoc(finaldoc_id: str, user: AuthUser = Depends(get_current_user)):
    document = await FinalDocService.get_finaldoc(finaldoc_id)
    await LaporanService.get_laporan(document["laporan_id"], user_id=user.id, can_view_all=user.can_review)
    return document


@router.delete("/{finaldoc_id}")
async def delete_finaldoc(
    finaldoc_id: str,
    storage: StorageDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a final document and its file (uploader or admin)."""
    document = await FinalDocService.get_finaldoc(finaldoc_id)
    if document["uploaded_by"] != user.id and not user.is_admin:
        raise PermissionDeniedError("delete another user's final document")

    await FinalDocService.delete_finaldoc(finaldoc_id)
    await run_in_threadpool(storage.delete, document["stored_name"])
    logger.info(f"Final document {finaldoc_id} deleted by {user.id}")
    return {"id": finaldoc_id, "message": "Final document deleted"}
