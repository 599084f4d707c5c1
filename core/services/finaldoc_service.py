# =============================================================================
# core/services/finaldoc_service.py - Final Document Records
# =============================================================================
# Metadata for files attached to approved reports. The bytes live on disk
# (StorageService); this collection records who uploaded what, for which
# report.
# =============================================================================

import logging
from typing import Any

from app.exceptions import DocumentNotFoundError
from core.services.storage_service import StorageService
from lib.mongo_client import MongoDBClient
from lib.utils import serialize_document, to_object_id, utcnow

logger = logging.getLogger(__name__)

COLLECTION = "finaldocs"


class FinalDocService:

    @staticmethod
    def _collection():
        return MongoDBClient.get_collection(COLLECTION)

    @staticmethod
    async def create_finaldoc(
        laporan_id: str,
        filename: str,
        stored_name: str,
        content_type: str | None,
        size_bytes: int,
        uploaded_by: str,
    ) -> dict[str, Any]:
        document = {
            "laporan_id": laporan_id,
            "filename": filename,
            "stored_name": stored_name,
            "url": StorageService.public_url(stored_name),
            "content_type": content_type,
            "size_bytes": size_bytes,
            "uploaded_by": uploaded_by,
            "created_at": utcnow(),
        }
        result = await FinalDocService._collection().insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(f"Final document {result.inserted_id} attached to laporan {laporan_id}")
        return serialize_document(document)

    @staticmethod
    async def get_finaldoc(finaldoc_id: str) -> dict[str, Any]:
        document = await FinalDocService._collection().find_one({"_id": to_object_id(finaldoc_id)})
        if not document:
            raise DocumentNotFoundError(COLLECTION, finaldoc_id)
        return serialize_document(document)

    @staticmethod
    async def list_finaldocs(
        laporan_id: str | None = None,
        laporan_ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Args:
            laporan_id: Documents of one report
            laporan_ids: Documents of any of these reports (ignored if laporan_id given)
        """
        query: dict[str, Any] = {}
        if laporan_id:
            query["laporan_id"] = laporan_id
        elif laporan_ids is not None:
            query["laporan_id"] = {"$in": laporan_ids}

        cursor = FinalDocService._collection().find(query).sort("created_at", -1)
        return [serialize_document(d) for d in await cursor.to_list(length=None)]

    @staticmethod
    async def delete_finaldoc(finaldoc_id: str) -> dict[str, Any]:
        """Remove the record and return it so the caller can delete the file."""
        document = await FinalDocService.get_finaldoc(finaldoc_id)
        await FinalDocService._collection().delete_one({"_id": to_object_id(finaldoc_id)})
        return document

    @staticmethod
    async def delete_for_laporan(laporan_id: str) -> list[dict[str, Any]]:
        """
        Remove every record of one report.

        Returns:
            The removed records, so the caller can delete their files
        """
        collection = FinalDocService._collection()
        cursor = collection.find({"laporan_id": laporan_id})
        documents = [serialize_document(d) for d in await cursor.to_list(length=None)]
        if documents:
            await collection.delete_many({"laporan_id": laporan_id})
            logger.info(f"Removed {len(documents)} final document(s) of laporan {laporan_id}")
        return documents
