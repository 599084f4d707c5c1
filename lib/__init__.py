# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - mongo_client.py: Process-wide MongoDB connection
# - utils.py: ObjectId parsing and document serialization
# =============================================================================

from lib.mongo_client import MongoDBClient, MongoDBClientError
from lib.utils import serialize_document, to_object_id, utcnow

__all__ = [
    "MongoDBClient",
    "MongoDBClientError",
    "serialize_document",
    "to_object_id",
    "utcnow",
]
