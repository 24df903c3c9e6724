"""
Local Filesystem Storage Backend

Stores uploaded assets on the local disk, one folder per slot::

    {base_path}/
    ├── profile/
    ├── posters/
    └── videos/

Fine for a single server. Several servers need a shared store.
"""

import logging
import aiofiles
import aiofiles.os
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional

from app.storage.base import (
    StorageBackend,
    StoredFile,
    StorageError,
    FileNotFoundError as StorageFileNotFoundError,
)

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """
    Local filesystem storage implementation.

    Uses async file I/O to avoid blocking the event loop.

    Attributes:
        base_path: Root directory for all file storage
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"LocalStorage initialized at: {self.base_path.absolute()}")

    def _get_full_path(self, relative_path: str) -> Path:
        """
        Convert relative path to full absolute path.

        Raises:
            StorageError: If path would escape base_path ("../../etc/passwd")
        """
        resolved = (self.base_path / relative_path).resolve()

        try:
            resolved.relative_to(self.base_path.resolve())
        except ValueError:
            logger.warning(f"Path traversal attempt detected: {relative_path}")
            raise StorageError(f"Invalid path: {relative_path}")

        return resolved

    async def save(
        self,
        file_content: bytes,
        destination_path: str,
        content_type: Optional[str] = None
    ) -> StoredFile:
        try:
            full_path = self._get_full_path(destination_path)
            full_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(full_path, 'wb') as f:
                await f.write(file_content)

            logger.info(f"File saved: {destination_path} ({len(file_content)} bytes)")

            return StoredFile(
                path=destination_path,
                size=len(file_content),
                content_type=content_type or "application/octet-stream",
                stored_at=datetime.now(timezone.utc),
            )

        except OSError as e:
            # disk full, permission denied, etc.
            logger.error(f"Failed to save file {destination_path}: {e}")
            raise StorageError(f"Failed to save file: {e}")

    async def get(self, path: str) -> bytes:
        full_path = self._get_full_path(path)

        if not full_path.is_file():
            raise StorageFileNotFoundError(f"File not found: {path}")

        try:
            async with aiofiles.open(full_path, 'rb') as f:
                return await f.read()
        except OSError as e:
            logger.error(f"Failed to read file {path}: {e}")
            raise StorageError(f"Failed to read file: {e}")

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)

        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            # Already clean
            logger.debug(f"File already doesn't exist: {path}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"File deleted: {path}")
        return True

    async def exists(self, path: str) -> bool:
        try:
            return self._get_full_path(path).is_file()
        except StorageError:
            return False
