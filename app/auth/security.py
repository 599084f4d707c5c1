# =============================================================================
# app/auth/security.py - Passwords & Tokens
# =============================================================================
# Password hashing (bcrypt via passlib) and HS256 bearer tokens (python-jose).
# =============================================================================

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from app.auth.models import AuthUser, TokenPayload

JWT_ALGORITHM = "HS256"

# Session key holding the serialized AuthUser
SESSION_USER_KEY = "user"

# Session key holding the pending OAuth state
SESSION_OAUTH_STATE_KEY = "oauth_state"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """False for accounts without a password (Google-only sign-in)."""
    if not password_hash:
        return False
    return _pwd_context.verify(password, password_hash)


def create_access_token(user: AuthUser, secret: str, expires_minutes: int) -> str:
    """
    Sign a bearer token for the user.

    Claims: sub (user id), email, name, role, iat, exp.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str) -> AuthUser:
    """
    Verify a bearer token and rebuild the principal.

    Raises:
        jose.JWTError: If the signature is invalid or the token expired
        pydantic.ValidationError: If required claims are missing
    """
    payload = TokenPayload(**jwt.decode(token, secret, algorithms=[JWT_ALGORITHM]))
    return AuthUser(id=payload.sub, email=payload.email, name=payload.name, role=payload.role)
