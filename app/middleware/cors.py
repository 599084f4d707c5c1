# =============================================================================
# app/middleware/cors.py - CORS Origin Gate
# =============================================================================
# Decides allow/deny for the request Origin before anything else runs.
#
# One policy is configured per process (CORS_POLICY):
# - "list":    origin must be a literal member of CORS_ORIGINS
# - "pattern": origin must match FRONTEND_ORIGIN, VERCEL_URL, or localhost
#              on a four digit port
#
# Requests without an Origin header (curl, server-to-server, same-origin
# navigation) always pass. Denied origins never reach the app: they are
# rendered by the central exception handler as CORSOriginDeniedError.
# =============================================================================

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from app.config import Settings, strip_scheme
from app.exceptions import CORSOriginDeniedError, solinum_exception_handler

logger = logging.getLogger(__name__)

CORS_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")

LOCALHOST_ALTERNATIVE = r"localhost:\d{4}"


def build_origin_pattern(frontend_origin: str, deployment_host: str | None = None) -> re.Pattern:
    """
    Build the origin expression for the "pattern" policy.

    Hosts are scheme-less and matched literally; the scheme itself is
    optional in the origin. An unset deployment host adds no alternative.

    Example:
        build_origin_pattern("https://app.netlify.app", "app-123.vercel.app")
        -> ^(https?://)?(app\\.netlify\\.app|app\\-123\\.vercel\\.app|localhost:\\d{4})$
    """
    alternatives = [
        re.escape(strip_scheme(host))
        for host in (frontend_origin, deployment_host)
        if host and strip_scheme(host)
    ]
    alternatives.append(LOCALHOST_ALTERNATIVE)
    return re.compile(rf"^(https?://)?({'|'.join(alternatives)})$")


@dataclass(frozen=True)
class OriginPolicy:
    """
    Immutable origin check.

    Attributes:
        kind: "list" or "pattern"
        origins: Whitelisted origins (list policy)
        pattern: Compiled expression (pattern policy)
    """
    kind: Literal["list", "pattern"]
    origins: frozenset[str] = field(default_factory=frozenset)
    pattern: re.Pattern | None = None

    @classmethod
    def whitelist(cls, origins) -> "OriginPolicy":
        return cls(kind="list", origins=frozenset(origins))

    @classmethod
    def from_pattern(cls, frontend_origin: str, deployment_host: str | None = None) -> "OriginPolicy":
        return cls(kind="pattern", pattern=build_origin_pattern(frontend_origin, deployment_host))

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginPolicy":
        if settings.CORS_POLICY == "list":
            return cls.whitelist(settings.cors_origins_list)
        return cls.from_pattern(settings.FRONTEND_ORIGIN, settings.VERCEL_URL)

    def allows(self, origin: str | None) -> bool:
        """Absent origin is always allowed."""
        if not origin:
            return True
        if self.kind == "list":
            return origin in self.origins
        return self.pattern is not None and self.pattern.fullmatch(origin) is not None

    def describe(self) -> str:
        if self.kind == "list":
            return f"list{sorted(self.origins)}"
        return f"pattern {self.pattern.pattern if self.pattern else None}"


class OriginGateMiddleware(CORSMiddleware):
    """
    Starlette's CORSMiddleware driven by an OriginPolicy.

    Allowed origins get the usual credentialed CORS headers (simple and
    preflight). Denied origins short-circuit with the error response, so
    they never see Access-Control-Allow-* headers.
    """

    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        super().__init__(
            app,
            allow_origins=(),
            allow_methods=CORS_METHODS,
            allow_headers=("*",),
            allow_credentials=True,
        )
        self.policy = policy

    def is_allowed_origin(self, origin: str) -> bool:
        return self.policy.allows(origin)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            origin = Headers(scope=scope).get("origin")
            if not self.policy.allows(origin):
                logger.error(f"CORS BLOCKED: Origin {origin} not matched by {self.policy.kind} policy")
                response = await solinum_exception_handler(
                    Request(scope, receive),
                    CORSOriginDeniedError(origin),
                )
                await response(scope, receive, send)
                return

        await super().__call__(scope, receive, send)
