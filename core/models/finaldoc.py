# =============================================================================
# core/models/finaldoc.py - Final Document Schemas
# =============================================================================
# The signed/final file attached to an approved report. Files live under
# UPLOAD_DIR and are served at /uploads/<stored_name>.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel


class FinalDocResponse(BaseModel):
    id: str
    laporan_id: str
    filename: str
    stored_name: str
    url: str
    content_type: str | None = None
    size_bytes: int
    uploaded_by: str
    created_at: datetime | None = None


class FinalDocList(BaseModel):
    documents: list[FinalDocResponse]
    total: int
