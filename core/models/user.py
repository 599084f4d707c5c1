# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# Users sign up with email/password or Google. The role decides what they
# can see and do:
# - user:     creates and submits their own reports
# - approver: decides pending reports
# - admin:    everything, including user management
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    USER = "user"
    APPROVER = "approver"
    ADMIN = "admin"


class UserResponse(BaseModel):
    """
    User as returned to clients (never includes the password hash).

    Example:
        {
            "id": "65a1f0c2e4b0a1b2c3d4e5f6",
            "email": "sari@example.com",
            "name": "Sari",
            "role": "user",
            "provider": "local"
        }
    """
    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    provider: str = Field(default="local", description="'local' or 'google'")
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserUpdate(BaseModel):
    """
    Partial update.

    role is only honoured for admins; the route enforces that.
    """
    name: str | None = Field(default=None, min_length=1, max_length=120)
    role: UserRole | None = None


class UserList(BaseModel):
    users: list[UserResponse]
    total: int
