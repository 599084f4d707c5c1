# =============================================================================
# core/services/storage_service.py - Upload Directory Operations
# =============================================================================
# Final documents are written to UPLOAD_DIR, which the app also serves
# statically under /uploads.
# =============================================================================

import logging
import re
import uuid
from pathlib import Path

from app.exceptions import StorageWriteError

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


def safe_filename(filename: str) -> str:
    """Keep letters, digits, dot, dash and underscore; never a path."""
    name = Path(filename.replace("\\", "/")).name
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "document"


class StorageService:
    """Writes and removes files under one base directory."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def save(self, content: bytes, filename: str) -> str:
        """
        Store content under a unique name.

        Returns:
            The stored file name (relative to base_dir)

        Raises:
            StorageWriteError: If the directory can't be created or written
        """
        stored_name = f"{uuid.uuid4().hex}_{safe_filename(filename)}"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / stored_name).write_bytes(content)
        except OSError as e:
            logger.error(f"Storage write failed for {stored_name}: {e}")
            raise StorageWriteError(str(e)) from e

        logger.info(f"Stored upload: {stored_name} ({len(content)} bytes)")
        return stored_name

    def delete(self, stored_name: str) -> bool:
        """Remove a stored file. Returns False if it was already gone."""
        path = self.base_dir / safe_filename(stored_name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Upload already missing: {stored_name}")
            return False
        return True

    @staticmethod
    def public_url(stored_name: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{stored_name}"
