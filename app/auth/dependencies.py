# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# The authentication middleware (app/middleware/authentication.py) resolves
# the principal; these dependencies enforce it per route.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, Request

from app.auth.models import AuthUser
from app.exceptions import AuthenticationRequiredError, PermissionDeniedError
from core.models.user import UserRole

logger = logging.getLogger(__name__)


async def get_current_user_optional(request: Request) -> Optional[AuthUser]:
    """
    Return the request principal, or None for anonymous requests.

    Useful for endpoints that work with or without authentication.
    """
    user = request.scope.get("user")
    if isinstance(user, AuthUser):
        return user
    return None


async def get_current_user(
    user: Optional[AuthUser] = Depends(get_current_user_optional),
) -> AuthUser:
    """
    Require an authenticated user.

    Raises:
        AuthenticationRequiredError: 401 if neither a session nor a valid
            bearer token identified the caller
    """
    if user is None:
        raise AuthenticationRequiredError()
    return user


def require_role(*roles: UserRole):
    """
    Build a dependency that only admits the given roles.

    Admins are always admitted.

    Usage:
        @router.get("/pending")
        async def pending(user: AuthUser = Depends(require_role(UserRole.APPROVER))):
            ...
    """
    allowed = set(roles) | {UserRole.ADMIN}

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in allowed:
            logger.info(f"User {user.id} ({user.role.value}) denied; needs one of {sorted(r.value for r in allowed)}")
            raise PermissionDeniedError(f"requires role {' or '.join(sorted(r.value for r in allowed))}")
        return user

    return dependency
