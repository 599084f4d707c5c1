# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# The same handlers render route errors and requests rejected by the CORS
# gate (see app/middleware/cors.py).
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SolinumException(Exception):
    """
    Base exception for the Solinum API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SOLINUM_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Policy Exceptions
# =============================================================================

class CORSOriginDeniedError(SolinumException):
    """Raised when a browser origin is not allowed by the CORS policy."""

    def __init__(self, origin: str):
        super().__init__(
            message=f"Not allowed by CORS for origin: {origin}",
            code="CORS_ORIGIN_DENIED",
            status_code=403,
            suggestion="Add the origin to CORS_ORIGINS or set FRONTEND_ORIGIN",
            details={"origin": origin}
        )
        self.origin = origin


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthenticationRequiredError(SolinumException):
    """Raised when a route needs a logged-in user."""

    def __init__(self):
        super().__init__(
            message="Authentication required",
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
            suggestion="Log in via POST /api/auth/login or send a Bearer token",
        )


class InvalidCredentialsError(SolinumException):
    """Raised when email/password do not match."""

    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class PermissionDeniedError(SolinumException):
    """Raised when the user lacks the role or ownership an action needs."""

    def __init__(self, action: str):
        super().__init__(
            message=f"Not permitted: {action}",
            code="PERMISSION_DENIED",
            status_code=403,
            details={"action": action}
        )


class EmailAlreadyRegisteredError(SolinumException):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            message=f"Email already registered: {email}",
            code="EMAIL_ALREADY_REGISTERED",
            status_code=409,
            suggestion="Log in instead, or use Google sign-in if the account was created with it",
            details={"email": email}
        )


class OAuthNotConfiguredError(SolinumException):
    """Raised when Google sign-in is used without client credentials."""

    def __init__(self):
        super().__init__(
            message="Google sign-in is not configured",
            code="OAUTH_NOT_CONFIGURED",
            status_code=503,
            suggestion="Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET",
        )


class OAuthStateMismatchError(SolinumException):
    """Raised when the OAuth callback state doesn't match the session."""

    def __init__(self):
        super().__init__(
            message="OAuth state mismatch",
            code="OAUTH_STATE_MISMATCH",
            status_code=400,
            suggestion="Start the sign-in again from /api/auth/google",
        )


class OAuthExchangeError(SolinumException):
    """Raised when the provider rejects the code exchange or profile lookup."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Google sign-in failed: {error}",
            code="OAUTH_EXCHANGE_FAILED",
            status_code=502,
            suggestion="Try signing in again",
            details={"error": error}
        )


# =============================================================================
# Document Exceptions
# =============================================================================

class DocumentNotFoundError(SolinumException):
    """Raised when a document ID doesn't exist in a collection."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(
            message=f"Not found in {collection}: {document_id}",
            code="NOT_FOUND",
            status_code=404,
            suggestion="Check that the id is correct",
            details={"collection": collection, "id": document_id}
        )


class InvalidObjectIdError(SolinumException):
    """Raised when a path id is not a valid ObjectId."""

    def __init__(self, value: str):
        super().__init__(
            message=f"Invalid id: {value}",
            code="INVALID_ID",
            status_code=400,
            suggestion="Ids are 24-character hexadecimal strings",
            details={"id": value}
        )


class InvalidStateError(SolinumException):
    """Raised when an action is not allowed in the document's current status."""

    def __init__(self, document_id: str, status: str, action: str):
        super().__init__(
            message=f"Cannot {action} while status is '{status}'",
            code="INVALID_STATE",
            status_code=409,
            details={"id": document_id, "status": status, "action": action}
        )


class DatabaseUnavailableError(SolinumException):
    """Raised when a route needs MongoDB but no connection is established."""

    def __init__(self, error: str | None = None):
        super().__init__(
            message="Database is not connected",
            code="DATABASE_UNAVAILABLE",
            status_code=503,
            suggestion="Check MONGO_URI and /api/diag/db",
            details={"error": error} if error else None
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(SolinumException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(SolinumException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageWriteError(SolinumException):
    """Raised when an uploaded file cannot be written to UPLOAD_DIR."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to store file: {error}",
            code="STORAGE_WRITE_ERROR",
            status_code=500,
            suggestion="Check that UPLOAD_DIR exists and is writable",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def solinum_exception_handler(
    request: Request,
    exc: SolinumException
) -> JSONResponse:
    """
    Convert SolinumException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_errors(exc),
        }
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Keep only the JSON-safe parts of pydantic error entries."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def register_exception_handlers(app) -> None:
    """Attach all handlers to a FastAPI app."""
    app.add_exception_handler(SolinumException, solinum_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
