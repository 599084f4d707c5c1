# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# Mounted at /api/users. Admins manage everyone; users can read and rename
# themselves.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request

from app.auth import AuthUser, get_current_user, require_role
from app.auth.security import SESSION_USER_KEY
from app.exceptions import PermissionDeniedError
from core.models.user import UserList, UserResponse, UserRole, UserUpdate
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserList)
async def list_users(
    role: UserRole | None = None,
    user: AuthUser = Depends(require_role(UserRole.ADMIN)),
):
    """List all users (admin only), optionally filtered by role."""
    users = await UserService.list_users(role=role)
    return UserList(users=users, total=len(users))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, user: AuthUser = Depends(get_current_user)):
    """Get one user. Non-admins can only read themselves."""
    if user_id != user.id and not user.is_admin:
        raise PermissionDeniedError("read another user")
    return await UserService.get_user(user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    request: Request,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update a user.

    Users may change their own name; only admins may change roles or
    edit other users.
    """
    if user_id != user.id and not user.is_admin:
        raise PermissionDeniedError("edit another user")
    if body.role is not None and not user.is_admin:
        raise PermissionDeniedError("change roles")

    updated = await UserService.update_user(user_id, body.model_dump(exclude_unset=True))

    # Keep the session principal in sync with the profile
    if user_id == user.id and SESSION_USER_KEY in request.session:
        refreshed = AuthUser(id=user.id, email=updated["email"], name=updated["name"], role=updated["role"])
        request.session[SESSION_USER_KEY] = refreshed.to_session()

    return updated


@router.delete("/{user_id}")
async def delete_user(user_id: str, user: AuthUser = Depends(require_role(UserRole.ADMIN))):
    """Delete a user (admin only). Admins can't delete themselves."""
    if user_id == user.id:
        raise PermissionDeniedError("delete your own account")
    await UserService.delete_user(user_id)
    return {"id": user_id, "message": "User deleted"}
