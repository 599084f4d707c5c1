# =============================================================================
# core/models/approval.py - Approval Schemas
# =============================================================================
# One approval document is recorded per decision, so a report that was
# rejected and resubmitted keeps its full history.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ApprovalDecision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalRequest(BaseModel):
    note: str | None = Field(default=None, max_length=2000)


class RejectionRequest(BaseModel):
    """A rejection must tell the owner what to fix."""
    note: str = Field(..., min_length=1, max_length=2000)


class ApprovalResponse(BaseModel):
    id: str
    laporan_id: str
    decision: ApprovalDecision
    note: str | None = None
    approver_id: str
    created_at: datetime | None = None
