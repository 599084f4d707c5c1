# =============================================================================
# app/auth/oauth.py - Google OAuth 2.0 (authorization code flow)
# =============================================================================
# 1. /api/auth/google redirects to build_authorization_url(...)
# 2. Google redirects back to /api/auth/google/callback?code=...&state=...
# 3. exchange_code() trades the code for an access token
# 4. fetch_google_profile() reads the OpenID userinfo
#
# Both network calls accept an optional httpx.AsyncClient so tests can
# plug in httpx.MockTransport.
# =============================================================================

import logging
from contextlib import asynccontextmanager

import httpx
from pydantic import BaseModel

from app.exceptions import OAuthExchangeError

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

GOOGLE_SCOPES = ("openid", "email", "profile")

HTTP_TIMEOUT = 10


class GoogleProfile(BaseModel):
    """Subset of the OpenID userinfo response."""
    sub: str
    email: str
    email_verified: bool = False
    name: str | None = None
    picture: str | None = None


def build_authorization_url(client_id: str, redirect_uri: str, state: str) -> str:
    url = httpx.URL(GOOGLE_AUTHORIZE_URL, params={
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(GOOGLE_SCOPES),
        "state": state,
        "prompt": "select_account",
    })
    return str(url)


async def exchange_code(
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Trade an authorization code for an access token.

    Raises:
        OAuthExchangeError: On transport errors or a non-2xx answer
    """
    data = {
        "code": code,
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": redirect_uri,
        "grant_type": "authorization_code",
    }
    async with _http_client(client) as http:
        try:
            response = await http.post(GOOGLE_TOKEN_URL, data=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Google token exchange failed: {e}")
            raise OAuthExchangeError(str(e)) from e

    access_token = response.json().get("access_token")
    if not access_token:
        raise OAuthExchangeError("token response had no access_token")
    return access_token


async def fetch_google_profile(
    access_token: str,
    client: httpx.AsyncClient | None = None,
) -> GoogleProfile:
    """
    Raises:
        OAuthExchangeError: On transport errors, non-2xx, or a profile without
            a verified email
    """
    async with _http_client(client) as http:
        try:
            response = await http.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Google userinfo failed: {e}")
            raise OAuthExchangeError(str(e)) from e

    payload = response.json()
    if not payload.get("email"):
        raise OAuthExchangeError("Google profile has no email")

    profile = GoogleProfile(**payload)
    # Accounts are linked by email, so it must belong to the Google user
    if not profile.email_verified:
        logger.warning(f"Google sign-in refused for unverified email {profile.email}")
        raise OAuthExchangeError("email not verified")
    return profile


@asynccontextmanager
async def _http_client(client: httpx.AsyncClient | None):
    """Use the given client as-is, or own a short-lived one."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as owned:
        yield owned
