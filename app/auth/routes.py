# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Mounted at /api/auth:
# - POST /register, POST /login, POST /logout, GET /me
# - GET /google, GET /google/callback (Google sign-in)
#
# Logging in stores the principal in the session cookie; when JWT_SECRET
# is set a bearer token is returned as well for non-browser clients.
# =============================================================================

import logging
import secrets

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, LoginRequest, LoginResponse, RegisterRequest
from app.auth.oauth import build_authorization_url, exchange_code, fetch_google_profile
from app.auth.security import (
    SESSION_OAUTH_STATE_KEY,
    SESSION_USER_KEY,
    create_access_token,
    hash_password,
    verify_password,
)
from app.config import Settings
from app.dependencies import SettingsDep
from app.exceptions import (
    DatabaseUnavailableError,
    DocumentNotFoundError,
    InvalidCredentialsError,
    OAuthExchangeError,
    OAuthNotConfiguredError,
    OAuthStateMismatchError,
)
from core.models.user import UserResponse
from core.services.user_service import UserService, public_user

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helpers
# =============================================================================

def _establish_session(request: Request, user: dict, settings: Settings) -> LoginResponse:
    """Put the user in a fresh session and build the login response."""
    principal = AuthUser(
        id=user["id"],
        email=user.get("email"),
        name=user.get("name"),
        role=user.get("role", "user"),
    )
    request.session.clear()
    request.session[SESSION_USER_KEY] = principal.to_session()

    token = None
    if settings.JWT_SECRET:
        token = create_access_token(principal, settings.JWT_SECRET, settings.JWT_EXPIRE_MINUTES)
    else:
        logger.warning("JWT_SECRET not set; login is session-only")

    return LoginResponse(user=UserResponse(**user), access_token=token)


def _google_redirect_uri(request: Request, settings: Settings) -> str:
    return settings.GOOGLE_CALLBACK_URL or str(request.url_for("google_callback"))


# =============================================================================
# Email / Password
# =============================================================================

@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, request: Request, settings: SettingsDep):
    """
    Create a local account and log it in.

    Raises:
        409: If the email is already registered
    """
    user = await UserService.create_user(
        email=body.email,
        name=body.name,
        password_hash=hash_password(body.password),
    )
    return _establish_session(request, user, settings)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, request: Request, settings: SettingsDep):
    """
    Log in with email and password.

    Raises:
        401: If the email is unknown or the password doesn't match
    """
    document = await UserService.find_by_email(body.email)
    if not document or not verify_password(body.password, document.get("password_hash")):
        logger.info(f"Failed login for {body.email}")
        raise InvalidCredentialsError()

    return _establish_session(request, public_user(document), settings)


@router.post("/logout")
async def logout(request: Request):
    """Clear the session. Safe to call when not logged in."""
    request.session.clear()
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> UserResponse:
    """
    Get the current user's profile.

    Falls back to the session principal when the profile can't be loaded.
    """
    try:
        return UserResponse(**await UserService.get_user(user.id))
    except (DatabaseUnavailableError, DocumentNotFoundError) as e:
        logger.warning(f"Could not fetch user profile: {e}")

    return UserResponse(id=user.id, email=user.email or "", name=user.display_name, role=user.role)


# =============================================================================
# Google Sign-In
# =============================================================================

@router.get("/google")
async def google_login(request: Request, settings: SettingsDep):
    """Redirect to Google's consent screen."""
    if not settings.google_oauth_enabled:
        raise OAuthNotConfiguredError()

    state = secrets.token_urlsafe(24)
    request.session[SESSION_OAUTH_STATE_KEY] = state
    url = build_authorization_url(
        settings.GOOGLE_CLIENT_ID,
        _google_redirect_uri(request, settings),
        state,
    )
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    settings: SettingsDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """
    Finish Google sign-in and send the browser back to the frontend.

    Raises:
        400: If the state doesn't match the one issued by /google
        502: If Google rejects the code or profile lookup
    """
    if not settings.google_oauth_enabled:
        raise OAuthNotConfiguredError()

    expected_state = request.session.pop(SESSION_OAUTH_STATE_KEY, None)
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise OAuthStateMismatchError()

    if error or not code:
        raise OAuthExchangeError(error or "missing authorization code")

    access_token = await exchange_code(
        code,
        settings.GOOGLE_CLIENT_ID,
        settings.GOOGLE_CLIENT_SECRET,
        _google_redirect_uri(request, settings),
    )
    profile = await fetch_google_profile(access_token)

    user = await UserService.upsert_google_user(
        google_id=profile.sub,
        email=profile.email,
        name=profile.name or profile.email,
        avatar_url=profile.picture,
    )
    _establish_session(request, user, settings)

    logger.info(f"Google sign-in for user {user['id']}")
    return RedirectResponse(settings.FRONTEND_ORIGIN, status_code=status.HTTP_302_FOUND)
