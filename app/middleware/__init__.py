# =============================================================================
# app/middleware/ - Request Middleware
# =============================================================================
# Middleware applied by app.main.create_app (outermost first):
# - cors.py: origin gate (allow/deny + CORS headers)
# - Starlette SessionMiddleware (signed cookie sessions, configured in main)
# - authentication.py: attaches the principal from session or bearer token
# - security_headers.py: hardening response headers
# =============================================================================

from .authentication import SessionTokenBackend
from .cors import OriginGateMiddleware, OriginPolicy, build_origin_pattern
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "SessionTokenBackend",
    "OriginGateMiddleware",
    "OriginPolicy",
    "build_origin_pattern",
    "SecurityHeadersMiddleware",
]
