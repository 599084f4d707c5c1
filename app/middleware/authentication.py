# =============================================================================
# app/middleware/authentication.py - Principal Resolution
# =============================================================================
# Backend for Starlette's AuthenticationMiddleware. Runs after the session
# middleware and attaches request.user from, in order:
# 1. The "user" entry of the session (set at login / Google callback)
# 2. An "Authorization: Bearer <jwt>" header signed with JWT_SECRET
#
# Either way the principal is reloaded from the users collection, so role
# changes and deletions apply to sessions and tokens issued earlier. Only
# when the database can't be reached is the stored principal used as-is.
#
# Never rejects a request: unknown or invalid credentials leave the request
# anonymous and route dependencies decide.
# =============================================================================

import logging

from jose import JWTError
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.authentication import AuthCredentials, AuthenticationBackend
from starlette.requests import HTTPConnection

from app.auth.models import AuthUser
from app.auth.security import SESSION_USER_KEY, decode_access_token
from app.exceptions import DatabaseUnavailableError, DocumentNotFoundError, InvalidObjectIdError
from core.services.user_service import UserService

logger = logging.getLogger(__name__)


class SessionTokenBackend(AuthenticationBackend):
    """Resolve the principal from the session cookie or a bearer token."""

    def __init__(self, jwt_secret: str | None = None):
        self.jwt_secret = jwt_secret

    async def authenticate(self, conn: HTTPConnection):
        from_session = self._from_session(conn)
        stored = from_session or self._from_bearer(conn)
        if stored is None:
            return None

        user = await self._reload(stored)
        if from_session is not None:
            if user is None:
                conn.session.pop(SESSION_USER_KEY, None)
            elif user != stored:
                conn.session[SESSION_USER_KEY] = user.to_session()

        if user is None:
            return None
        return AuthCredentials(["authenticated", user.role.value]), user

    async def _reload(self, stored: AuthUser) -> AuthUser | None:
        """Current version of the principal, or None if the account is gone."""
        try:
            document = await UserService.get_user(stored.id)
        except (DocumentNotFoundError, InvalidObjectIdError):
            logger.info(f"Credentials for unknown user {stored.id} ignored")
            return None
        except DatabaseUnavailableError:
            return stored
        except PyMongoError as e:
            logger.warning(f"Could not reload user {stored.id}, using stored principal: {e}")
            return stored

        return AuthUser(
            id=document["id"],
            email=document.get("email"),
            name=document.get("name"),
            role=document.get("role", stored.role),
        )

    def _from_session(self, conn: HTTPConnection) -> AuthUser | None:
        if "session" not in conn.scope:
            return None

        data = conn.session.get(SESSION_USER_KEY)
        if not data:
            return None

        try:
            return AuthUser(**data)
        except (TypeError, ValidationError) as e:
            logger.warning(f"Dropping malformed session principal: {e}")
            conn.session.pop(SESSION_USER_KEY, None)
            return None

    def _from_bearer(self, conn: HTTPConnection) -> AuthUser | None:
        authorization = conn.headers.get("Authorization")
        if not authorization:
            return None

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        if not self.jwt_secret:
            logger.warning("Bearer token received but JWT_SECRET is not configured")
            return None

        try:
            return decode_access_token(token.strip(), self.jwt_secret)
        except (JWTError, ValidationError) as e:
            logger.warning(f"Bearer token rejected: {e}")
            return None
