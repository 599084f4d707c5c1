# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from app.exceptions import InvalidObjectIdError


# =============================================================================
# ObjectId Utilities
# =============================================================================

def to_object_id(value: str | ObjectId) -> ObjectId:
    """
    Parse a path/body id into an ObjectId.

    Raises:
        InvalidObjectIdError: 400 if the value is not a 24-character hex id

    Example:
        oid = to_object_id("65a1f0c2e4b0a1b2c3d4e5f6")
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidObjectIdError(str(value))


def serialize_document(document: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Make a MongoDB document JSON-friendly.

    "_id" becomes "id"; ObjectId values (top level and in lists) become
    strings.
    """
    if document is None:
        return None

    result: dict[str, Any] = {}
    for key, value in document.items():
        if key == "_id":
            key = "id"
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, list):
            value = [str(item) if isinstance(item, ObjectId) else item for item in value]
        result[key] = value
    return result


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
