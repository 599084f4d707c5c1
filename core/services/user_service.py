# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user CRUD operations and account lookup for login/OAuth.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from typing import Any

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.exceptions import DocumentNotFoundError, EmailAlreadyRegisteredError
from core.models.user import UserRole
from lib.mongo_client import MongoDBClient
from lib.utils import serialize_document, to_object_id, utcnow

logger = logging.getLogger(__name__)

COLLECTION = "users"

# Never leave the service layer through public_user()
PRIVATE_FIELDS = ("password_hash", "google_id")


def public_user(document: dict[str, Any]) -> dict[str, Any]:
    """Serialize a user document without credentials."""
    user = serialize_document(document)
    for field in PRIVATE_FIELDS:
        user.pop(field, None)
    return user


class UserService:
    """
    Service for user management operations.

    Methods returning users to routes strip credentials; find_by_email()
    returns the raw document because login needs the hash.
    """

    @staticmethod
    def _collection():
        return MongoDBClient.get_collection(COLLECTION)

    @staticmethod
    async def ensure_indexes() -> None:
        """One account per email, enforced by the database."""
        await UserService._collection().create_index([("email", ASCENDING)], unique=True, name="email_unique")

    @staticmethod
    async def create_user(
        email: str,
        name: str,
        password_hash: str | None = None,
        provider: str = "local",
        role: UserRole = UserRole.USER,
        google_id: str | None = None,
        avatar_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a new user.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
        """
        email = email.strip().lower()
        if await UserService.find_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        now = utcnow()
        document = {
            "email": email,
            "name": name.strip(),
            "password_hash": password_hash,
            "provider": provider,
            "role": role.value,
            "google_id": google_id,
            "avatar_url": avatar_url,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await UserService._collection().insert_one(document)
        except DuplicateKeyError as e:
            # Lost a race with a concurrent registration
            raise EmailAlreadyRegisteredError(email) from e
        document["_id"] = result.inserted_id

        logger.info(f"Created user: {result.inserted_id} ({provider})")
        return public_user(document)

    @staticmethod
    async def find_by_email(email: str) -> dict[str, Any] | None:
        """Raw document (with password_hash) or None."""
        return await UserService._collection().find_one({"email": email.strip().lower()})

    @staticmethod
    async def get_user(user_id: str) -> dict[str, Any]:
        """
        Raises:
            DocumentNotFoundError: If the user doesn't exist
        """
        document = await UserService._collection().find_one({"_id": to_object_id(user_id)})
        if not document:
            raise DocumentNotFoundError(COLLECTION, user_id)
        return public_user(document)

    @staticmethod
    async def list_users(role: UserRole | None = None) -> list[dict[str, Any]]:
        query = {"role": role.value} if role else {}
        cursor = UserService._collection().find(query).sort("created_at", -1)
        return [public_user(document) for document in await cursor.to_list(length=None)]

    @staticmethod
    async def update_user(user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update.

        Args:
            user_id: The user id
            changes: Fields to set (None values are ignored)

        Raises:
            DocumentNotFoundError: If the user doesn't exist
        """
        changes = {key: value for key, value in changes.items() if value is not None}
        if isinstance(changes.get("role"), UserRole):
            changes["role"] = changes["role"].value
        if not changes:
            return await UserService.get_user(user_id)

        changes["updated_at"] = utcnow()
        document = await UserService._collection().find_one_and_update(
            {"_id": to_object_id(user_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not document:
            raise DocumentNotFoundError(COLLECTION, user_id)

        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return public_user(document)

    @staticmethod
    async def delete_user(user_id: str) -> None:
        result = await UserService._collection().delete_one({"_id": to_object_id(user_id)})
        if result.deleted_count == 0:
            raise DocumentNotFoundError(COLLECTION, user_id)
        logger.info(f"Deleted user {user_id}")

    @staticmethod
    async def upsert_google_user(
        google_id: str,
        email: str,
        name: str,
        avatar_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Find the account for a Google profile, creating or linking it.

        An existing local account with the same email is linked to the
        Google id instead of duplicated.
        """
        collection = UserService._collection()
        email = email.strip().lower()

        document = await collection.find_one({"$or": [{"google_id": google_id}, {"email": email}]})
        if document is None:
            return await UserService.create_user(
                email=email,
                name=name or email,
                provider="google",
                google_id=google_id,
                avatar_url=avatar_url,
            )

        changes: dict[str, Any] = {"google_id": google_id, "updated_at": utcnow()}
        if avatar_url:
            changes["avatar_url"] = avatar_url
        document = await collection.find_one_and_update(
            {"_id": document["_id"]},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        logger.info(f"Google sign-in linked to user {document['_id']}")
        return public_user(document)
