# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.models.user import UserRole, UserResponse


class AuthUser(BaseModel):
    """
    Authenticated principal attached to the request.

    Stored as a plain dict in the session cookie at login and rebuilt by
    the authentication middleware on every request, or decoded from a
    bearer token. No database lookup is needed to authorize a request.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: UserRole = UserRole.USER

    # Starlette BaseUser interface (request.user)
    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id

    @property
    def identity(self) -> str:
        return self.id

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_review(self) -> bool:
        """Approvers and admins see every report."""
        return self.role in (UserRole.APPROVER, UserRole.ADMIN)

    def to_session(self) -> dict:
        return self.model_dump(mode="json")


class RegisterRequest(BaseModel):
    """Body for POST /api/auth/register."""
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class LoginRequest(BaseModel):
    """Body for POST /api/auth/login."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class LoginResponse(BaseModel):
    """
    Login result.

    access_token is None when JWT_SECRET is not configured; the session
    cookie still authenticates the browser.
    """
    user: UserResponse
    access_token: Optional[str] = None
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    """Decoded bearer token claims."""
    sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: UserRole = UserRole.USER
    exp: int
    iat: int
