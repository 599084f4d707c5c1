# =============================================================================
# core/models/laporan.py - Report (Laporan) Schemas
# =============================================================================
# A laporan is a report written by a user and sent through approval:
#
#   draft -> pending -> approved
#                    -> rejected -> (edit) -> pending
#
# Only approved reports can receive a final document.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class LaporanStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses in which the owner may still edit the report
EDITABLE_STATUSES = frozenset({LaporanStatus.DRAFT, LaporanStatus.REJECTED})


class LaporanCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=10_000)
    category: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=200)


class LaporanUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=200)


class LaporanResponse(BaseModel):
    id: str
    title: str
    description: str = ""
    category: str | None = None
    location: str | None = None
    status: LaporanStatus
    owner_id: str
    review_note: str | None = None
    reviewed_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LaporanList(BaseModel):
    laporan: list[LaporanResponse]
    total: int
    page: int
    page_size: int
