# =============================================================================
# lib/mongo_client.py - MongoDB Client Wrapper
# =============================================================================
# Singleton wrapper over pymongo's AsyncMongoClient.
#
# The connection is opened once at startup (app lifespan). A failed or
# skipped connection is not fatal: the process keeps serving, and only the
# routes that touch the database answer 503 (DatabaseUnavailableError).
#
# Usage:
#   from lib.mongo_client import MongoDBClient
#   reports = MongoDBClient.get_collection("laporan")
#   doc = await reports.find_one({"_id": oid})
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from app.exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)


class MongoDBClientError(Exception):
    """
    Error while connecting to MongoDB.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "MONGODB_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class MongoDBClient:
    """
    Process-wide MongoDB connection.

    All methods are class methods; there is one client per process.
    """

    _client: AsyncMongoClient | None = None
    _database: AsyncDatabase | None = None
    _last_error: str | None = None

    @classmethod
    async def connect(cls, uri: str, db_name: str, timeout_ms: int = 5000) -> AsyncDatabase:
        """
        Open the client and verify it with a ping.

        The database named in the URI wins over db_name.

        Raises:
            MongoDBClientError: If the server can't be reached
        """
        client = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            cls._last_error = str(e)
            await client.close()
            raise MongoDBClientError(
                message=f"Failed to connect to MongoDB: {e}",
                code="CONNECT_FAILED",
                suggestion="Check MONGO_URI and that the cluster allows this host",
            ) from e

        cls._client = client
        cls._database = client.get_default_database(default=db_name)
        cls._last_error = None
        logger.info(f"MongoDB connected: database '{cls._database.name}'")
        return cls._database

    @classmethod
    async def close(cls) -> None:
        if cls._client is not None:
            await cls._client.close()
            logger.info("MongoDB connection closed")
        cls._client = None
        cls._database = None

    @classmethod
    def is_connected(cls) -> bool:
        return cls._database is not None

    @classmethod
    def last_error(cls) -> str | None:
        return cls._last_error

    @classmethod
    def get_database(cls) -> AsyncDatabase:
        """
        Raises:
            DatabaseUnavailableError: If connect() never succeeded
        """
        if cls._database is None:
            raise DatabaseUnavailableError(cls._last_error)
        return cls._database

    @classmethod
    def get_collection(cls, name: str) -> AsyncCollection:
        return cls.get_database()[name]

    @classmethod
    async def ping(cls) -> bool:
        """Round-trip to the server; False when not connected or unreachable."""
        if cls._client is None:
            return False
        try:
            await cls._client.admin.command("ping")
            return True
        except PyMongoError as e:
            cls._last_error = str(e)
            logger.warning(f"MongoDB ping failed: {e}")
            return False
